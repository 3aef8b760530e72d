"""Disk preparation: Btrfs partitioning and layout, Snapper snapshots."""
