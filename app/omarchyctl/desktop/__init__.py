"""Desktop integration: GPU mode, Sunshine, Waybar, Hyprland and Ghostty."""
