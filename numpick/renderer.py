"""PIL-based key renderer — cards, HUD tiles, condition banner."""

from PIL import Image, ImageDraw, ImageFont

SIZE = (96, 96)
FONT_PATH = "/System/Library/Fonts/Helvetica.ttc"
JA_FONT_PATH = "/System/Library/Fonts/ヒラギノ角ゴシック W6.ttc"

BG_HUD = "#111827"
BG_DARK = "#1e293b"

CARD_COLORS = {
    "normal": ("#065f46", "#059669", "white"),
    "correct": ("#14532d", "#4ade80", "#4ade80"),
    "wrong": ("#7c2d12", "#ef4444", "#fca5a5"),
}

TIER_COLORS = {
    "beginner": "#22c55e",
    "intermediate": "#3b82f6",
    "advanced": "#eab308",
    "master": "#ef4444",
}

_font_paths = {"en": FONT_PATH, "ja": JA_FONT_PATH}


def set_font_paths(latin: str | None = None, ja: str | None = None):
    """Point the renderer at fonts available on this machine."""
    if latin:
        _font_paths["en"] = latin
    if ja:
        _font_paths["ja"] = ja


def _font(size: int, language: str = "en") -> ImageFont.FreeTypeFont:
    try:
        return ImageFont.truetype(_font_paths.get(language, _font_paths["en"]), size)
    except OSError:
        return ImageFont.load_default()


def status_to_color(tier: str) -> str:
    """Map a difficulty tier to its accent color."""
    return TIER_COLORS.get(tier, "#6b7280")


def render_empty(size=SIZE, bg: str = BG_HUD) -> Image.Image:
    return Image.new("RGB", size, bg)


def render_text_button(
    size: tuple[int, int] = SIZE,
    lines: list[str] | None = None,
    bg_color: str = BG_HUD,
    font_sizes: list[int] | None = None,
    colors: list[str] | None = None,
    language: str = "en",
) -> Image.Image:
    """Render a text-only key — up to 4 lines, centered vertically.

    font_sizes: per-line font sizes (default scales with line count)
    colors: per-line colors (default: white, then progressively dimmer)
    """
    img = Image.new("RGB", size, bg_color)
    if not lines:
        return img

    draw = ImageDraw.Draw(img)
    n = len(lines)

    if not font_sizes:
        font_sizes = {1: [22], 2: [14, 26], 3: [16, 13, 11]}.get(n, [14, 12, 10, 9])
    if not colors:
        colors = ["#ffffff", "#dddddd", "#aaaaaa", "#888888"][:n]
    font_sizes = list(font_sizes) + [font_sizes[-1]] * (n - len(font_sizes))
    colors = list(colors) + [colors[-1]] * (n - len(colors))

    fonts = [_font(s, language) for s in font_sizes]
    line_heights = [f.getbbox("Ag")[3] - f.getbbox("Ag")[1] for f in fonts]
    spacing = 6
    total_h = sum(line_heights) + spacing * (n - 1)
    y = (size[1] - total_h) // 2

    for i, text in enumerate(lines):
        draw.text((size[0] // 2, y), text, font=fonts[i], fill=colors[i], anchor="mt")
        y += line_heights[i] + spacing

    return img


def render_card(value: int, state: str = "normal", size=SIZE) -> Image.Image:
    """Number card; state is "normal", "correct" or "wrong"."""
    bg, outline, fg = CARD_COLORS.get(state, CARD_COLORS["normal"])
    img = Image.new("RGB", size, bg)
    d = ImageDraw.Draw(img)
    d.rectangle([3, 3, size[0] - 4, size[1] - 4], outline=outline,
                width=3 if state != "normal" else 2)
    text = str(value)
    fsize = 40 if len(text) <= 2 else 30
    d.text((size[0] // 2, size[1] // 2), text, font=_font(fsize), fill=fg, anchor="mm")
    return img


def render_hud_value(label: str, value: str, color: str = "#34d399",
                     size=SIZE) -> Image.Image:
    return render_text_button(size=size, lines=[label, value],
                              colors=["#9ca3af", color])


def render_timer(time_left: int, total: int, size=SIZE) -> Image.Image:
    """Seconds left with a bar; green, then yellow, then red as time runs out."""
    fraction = time_left / total if total > 0 else 0.0
    if fraction > 0.375:
        color = "#22c55e"
    elif fraction > 0.1875:
        color = "#eab308"
    else:
        color = "#ef4444"

    img = Image.new("RGB", size, BG_HUD)
    d = ImageDraw.Draw(img)
    d.text((48, 10), "TIME", font=_font(12), fill="#9ca3af", anchor="mt")
    d.text((48, 28), str(time_left), font=_font(26), fill=color, anchor="mt")
    bar_x, bar_y, bar_w, bar_h = 10, 66, 76, 14
    d.rectangle([bar_x, bar_y, bar_x + bar_w, bar_y + bar_h], outline="#4b5563", width=1)
    fill_w = max(0, int(bar_w * min(1.0, fraction)))
    if fill_w > 0:
        d.rectangle([bar_x + 1, bar_y + 1, bar_x + fill_w, bar_y + bar_h - 1], fill=color)
    return img


def render_banner(text: str, keys: int, language: str = "en",
                  bg: str = BG_DARK, fg: str = "#fbbf24",
                  size=SIZE) -> list[Image.Image]:
    """Draw text across a row of `keys` tiles and slice it per key."""
    width, height = size[0] * keys, size[1]
    banner = Image.new("RGB", (width, height), bg)
    d = ImageDraw.Draw(banner)
    fsize = 44
    font = _font(fsize, language)
    while fsize > 12 and d.textlength(text, font=font) > width - 24:
        fsize -= 2
        font = _font(fsize, language)
    d.text((width // 2, height // 2), text, font=font, fill=fg, anchor="mm")
    return [banner.crop((i * size[0], 0, (i + 1) * size[0], height))
            for i in range(keys)]


def render_countdown(n: int, size=SIZE) -> Image.Image:
    img = Image.new("RGB", size, BG_DARK)
    d = ImageDraw.Draw(img)
    if n > 0:
        d.text((48, 48), str(n), font=_font(56), fill="#fbbf24", anchor="mm")
    else:
        d.text((48, 48), "START", font=_font(22), fill="#34d399", anchor="mm")
    return img


def render_tier(tier: str, selected: bool, size=SIZE) -> Image.Image:
    color = status_to_color(tier)
    img = Image.new("RGB", size, color if selected else BG_HUD)
    d = ImageDraw.Draw(img)
    if not selected:
        d.rectangle([3, 3, size[0] - 4, size[1] - 4], outline=color, width=2)
    label = tier.upper()
    fsize = 14 if len(label) <= 8 else 11
    d.text((48, 48), label, font=_font(fsize),
           fill="white" if selected else color, anchor="mm")
    return img
