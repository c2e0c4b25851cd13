"""
Theme for the AnaMon UI.

Dark monitor palette, trace colours and the Qt stylesheet snippets used by
the monitor screen and the operator control panel.
"""

# =============================================================================
# PALETTE
# =============================================================================

COLORS = {
    # Screen surfaces, darkest first
    'background': '#070A0F',
    'background_alt': '#0A0E14',
    'header': '#0E131A',
    'panel': '#121821',
    'card': '#19202B',
    'border': '#27303D',

    'text': '#E4E9F0',
    'text_secondary': '#B9C2CF',
    'text_dim': '#737F90',

    # Sliders and neutral buttons
    'control': '#1A2230',
    'control_hover': '#232D3C',
    'control_pressed': '#2B3648',

    'primary': '#3F7FE8',
    'success': '#31B56F',
    'warning': '#F0B429',
    'danger': '#E5484D',

    # One colour per monitored channel, shared by trace and numeric
    'ecg': '#00FF88',
    'pleth': '#4DC3FF',
    'co2': '#FFD24D',
    'abp': '#FF5C5C',
    'temp': '#C9A0FF',
    'pressure': '#A7ADB9',
    'gas': '#B58CFF',
}

FONTS = {
    'family': 'Arial',
    'size_small': '11px',
    'size_normal': '12px',
    'size_medium': '13px',
    'size_title': '16px',
}

# Alarm priority / card status -> accent
PRIORITY_COLORS = {
    'warning': COLORS['warning'],
    'critical': COLORS['danger'],
}

_BUTTON_FILLS = {
    "primary": COLORS['primary'],
    "warning": COLORS['warning'],
    "danger": COLORS['danger'],
}


def get_rgba(hex_color, alpha):
    """'#RRGGBB' + alpha (0-1) -> Qt rgba() string."""
    value = hex_color.lstrip('#')
    r, g, b = (int(value[i:i + 2], 16) for i in (0, 2, 4))
    return f"rgba({r}, {g}, {b}, {alpha})"


# =============================================================================
# STYLESHEETS
# =============================================================================

def get_base_widget_style():
    return (
        f"QWidget {{ background-color: {COLORS['background']}; color: {COLORS['text']};"
        f" font-family: {FONTS['family']}; font-size: {FONTS['size_normal']}; }}"
        f" QLabel {{ background: none; }}"
    )


def get_bar_style(border_edge="bottom"):
    """Header/footer strip with a single separating edge."""
    edge = "top" if border_edge == "top" else "bottom"
    return f"QFrame {{ background-color: {COLORS['header']}; border-{edge}: 1px solid {COLORS['border']}; }}"


def get_button_style(variant="neutral", padding="8px 16px", min_width=None):
    """
    Flat push button. Coloured variants darken on hover/press through
    alpha; the neutral variant steps through the control greys.
    """
    fill = _BUTTON_FILLS.get(variant)
    if fill is None:
        fill, hover, pressed, fg = (COLORS['control'], COLORS['control_hover'],
                                    COLORS['control_pressed'], COLORS['text'])
    else:
        hover, pressed, fg = get_rgba(fill, 0.85), get_rgba(fill, 0.7), '#0B0F14'

    width = f" min-width: {min_width}px;" if min_width else ""
    return (
        f"QPushButton {{ background-color: {fill}; color: {fg}; padding: {padding};"
        f" border: none; border-radius: 6px; font-size: {FONTS['size_medium']};"
        f" font-weight: 700;{width} }}"
        f" QPushButton:hover {{ background-color: {hover}; }}"
        f" QPushButton:pressed {{ background-color: {pressed}; }}"
    )


def get_card_style(accent, status="normal"):
    """Vital card frame. Abnormal cards get a thick border tinted by priority."""
    alert = PRIORITY_COLORS.get(status)
    if alert is None:
        background, border = get_rgba(accent, 0.05), f"1px solid {get_rgba(COLORS['border'], 0.6)}"
    else:
        background, border = get_rgba(alert, 0.15), f"2px solid {alert}"
    return f"QFrame {{ background-color: {background}; border: {border}; border-radius: 6px; }}"


def get_alarm_item_style(priority):
    """One row of the alarm list, with a priority stripe on the left."""
    color = PRIORITY_COLORS.get(priority, COLORS['warning'])
    return (
        f"QFrame {{ background-color: {get_rgba(color, 0.12)}; color: {color};"
        f" border-left: 4px solid {color}; border-radius: 4px; }}"
    )


# Control panel

STYLE_GROUPBOX = f"""
    QGroupBox {{
        background-color: {COLORS['card']};
        border: 1px solid {COLORS['border']};
        border-radius: 8px;
        margin-top: 14px;
        padding: 10px;
        font-size: {FONTS['size_medium']};
        font-weight: 600;
    }}
    QGroupBox::title {{
        subcontrol-origin: margin;
        left: 10px;
        color: {COLORS['text_secondary']};
    }}
"""

STYLE_SLIDER = f"""
    QSlider::groove:horizontal {{ height: 6px; background: {COLORS['control']}; border-radius: 3px; }}
    QSlider::sub-page:horizontal {{ background: {COLORS['primary']}; border-radius: 3px; }}
    QSlider::handle:horizontal {{ background: {COLORS['text']}; width: 14px; margin: -5px 0; border-radius: 7px; }}
"""
