# theme.py - Elden Ring Save Manager look

import customtkinter as ctk

# ======== Color Palette ========
COLORS = {
    "gold": "#c8a45d",         # Buttons and headings
    "gold_dark": "#9c7c3c",    # Hover
    "selected": "#e0c98f",     # Selected backup row
    "text": "#ece6d6",         # Parchment white
    "text_dark": "#1b1712",    # Text on gold
    "background": "#15130f",
    "surface": "#2a261f",
    "missing": "#d0584a"       # Records whose folder is gone
}

# ======== Typography ========
FONTS = {
    "title": ("Georgia", 18, "bold"),
    "body": ("Georgia", 13),
    "button": ("Georgia", 13, "bold"),
    "small": ("Georgia", 11)
}

# ======== Component Styles ========
STYLES = {
    "button": {
        "fg_color": COLORS["gold"],
        "hover_color": COLORS["gold_dark"],
        "text_color": COLORS["text_dark"],
        "corner_radius": 4
    },
    "frame": {
        "fg_color": COLORS["background"],
        "border_width": 0
    },
    "entry": {
        "fg_color": COLORS["surface"],
        "text_color": COLORS["text"],
        "border_color": COLORS["gold"],
        "border_width": 1,
        "corner_radius": 4
    }
}


def row_style(selected, missing):
    """Colors for one row of the backup list"""
    if selected:
        return {"fg_color": COLORS["selected"], "text_color": COLORS["text_dark"]}
    return {
        "fg_color": COLORS["surface"],
        "text_color": COLORS["missing"] if missing else COLORS["text"]
    }


def configure_theme():
    ctk.set_appearance_mode("Dark")
    ctk.set_default_color_theme("dark-blue")
