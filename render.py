import random
from typing import Dict, List, Optional, Tuple

from models import BlockType, StickyBlockType, Vec2
from solution import Solution

ANSI_RESET = "\u001B[0m"
ANSI_GRAY = "\u001B[38;2;128;128;128m"
ANSI_STICKY: Dict[Optional[StickyBlockType], str] = {
    StickyBlockType.SLIME: "\u001B[48;2;169;197;78m\u001B[30m",
    StickyBlockType.SLIME_OFFSET: "\u001B[48;2;125;145;60m\u001B[30m",
    StickyBlockType.HONEY: "\u001B[48;2;235;169;55m\u001B[30m",
    StickyBlockType.HONEY_OFFSET: "\u001B[48;2;179;120;18m\u001B[30m",
    None: ANSI_GRAY,
}
ANSI_COLORS: List[str] = [
    "\u001B[48;2;128;0;0m",
    "\u001B[48;2;170;110;40m",
    "\u001B[48;2;128;128;0m",
    "\u001B[48;2;0;128;128m",
    "\u001B[48;2;0;0;128m",
    "\u001B[48;2;230;25;75m",
    "\u001B[48;2;245;130;48m\u001B[30m",
    "\u001B[48;2;255;255;25m\u001B[30m",
    "\u001B[48;2;210;245;60m\u001B[30m",
    "\u001B[48;2;60;180;75m\u001B[30m",
    "\u001B[48;2;70;240;240m\u001B[30m",
    "\u001B[48;2;0;130;200m",
    "\u001B[48;2;145;30;180m",
    "\u001B[48;2;240;50;230m\u001B[30m",
]

SVG_FILL: Dict[Optional[StickyBlockType], str] = {
    StickyBlockType.SLIME: "rgb(169,197,78)",
    StickyBlockType.SLIME_OFFSET: "rgb(125,145,60)",
    StickyBlockType.HONEY: "rgb(235,169,55)",
    StickyBlockType.HONEY_OFFSET: "rgb(179,120,18)",
    None: "rgb(200,200,200)",
}


def group_color(i: int) -> str:
    if i < len(ANSI_COLORS):
        return ANSI_COLORS[i]
    # Seeded per index so a group keeps its color between prints.
    rng = random.Random(i)
    r, g, b = (rng.randint(0, 128) for _ in range(3))
    return f"\u001B[48;2;{r};{g};{b}m"


def pretty_print(solution: Solution, color_sticky_blocks: bool = False) -> str:
    """Render the projection two characters per block.

    Buds print as ``##``; crystals print their group number (``..`` when
    uncovered).  Blocks are colored by material or by group index.
    """
    proj = solution.proj
    group_of: Dict[Vec2, int] = {}
    for gi, g in enumerate(solution.groups):
        for loc in g.block_locations:
            group_of.setdefault(loc, gi)

    def color(loc: Vec2) -> str:
        gi = group_of.get(loc)
        if color_sticky_blocks:
            return ANSI_STICKY[solution.groups[gi].block_type if gi is not None else None]
        return ANSI_GRAY if gi is None else group_color(gi)

    lines = []
    for y in proj.y_range:
        row = []
        for x in proj.x_range:
            loc = Vec2(x, y)
            block = proj[loc]
            if block is BlockType.BUD:
                row.append(f"{ANSI_GRAY}##{ANSI_RESET}")
            elif block is BlockType.CRYSTAL:
                gi = group_of.get(loc)
                label = ".." if gi is None else f"{gi:02d}"
                row.append(f"{color(loc)}{label}{ANSI_RESET}")
            else:
                row.append(f"{color(loc)}  {ANSI_RESET}")
        lines.append("".join(row))
    return "\n".join(lines)


def render_svg(solution: Solution, scale: int = 24) -> Tuple[str, str]:
    proj = solution.proj
    svg_w = proj.width * scale + 2
    svg_h = proj.height * scale + 2

    def _xy(loc: Vec2) -> Tuple[int, int]:
        return (loc.x - proj.x_range.start) * scale + 1, (loc.y - proj.y_range.start) * scale + 1

    parts = []
    for loc in proj.buds():
        x, y = _xy(loc)
        parts.append(f'<rect x="{x}" y="{y}" width="{scale}" height="{scale}" fill="rgb(90,60,130)"/>')

    for gi, g in enumerate(solution.groups):
        fill = SVG_FILL[g.block_type]
        for loc in sorted(g.block_locations):
            x, y = _xy(loc)
            parts.append(
                f'<rect x="{x}" y="{y}" width="{scale}" height="{scale}" fill="{fill}" '
                f'stroke="black" stroke-width="1"><title>group {gi}</title></rect>'
            )
        if g.immovable_loc is not None:
            x, y = _xy(g.immovable_loc)
            parts.append(
                f'<rect x="{x + scale // 4}" y="{y + scale // 4}" width="{scale // 2}" '
                f'height="{scale // 2}" fill="black"/>'
            )

    for loc in proj.crystals():
        x, y = _xy(loc)
        r = scale // 4
        parts.append(f'<circle cx="{x + scale // 2}" cy="{y + scale // 2}" r="{r}" fill="rgb(200,120,255)"/>')

    frame = f'<rect x="1" y="1" width="{svg_w - 2}" height="{svg_h - 2}" fill="none" stroke="black" stroke-width="2"/>'
    svg = (
        f'<svg class="layout-svg" xmlns="http://www.w3.org/2000/svg" '
        f'width="{svg_w}" height="{svg_h}" '
        f'viewBox="0 0 {svg_w} {svg_h}" preserveAspectRatio="xMinYMin meet">'
        f'{frame}{"".join(parts)}</svg>'
    )

    counts: Dict[Optional[StickyBlockType], int] = {}
    for g in solution.groups:
        counts[g.block_type] = counts.get(g.block_type, 0) + 1
    legend = "".join(
        f"<li><span class='swatch' style='background:{SVG_FILL[bt]}'></span>"
        f"{bt.value if bt else 'unassigned'} × {c}</li>"
        for bt, c in counts.items()
    )
    return svg, legend
