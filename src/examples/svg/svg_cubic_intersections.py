"""Creates a SVG file of a DIN A4 page (portrait format)
showing pairs of cubic Bezier curves with their crossings
and a loop with its self-intersection marked.
The curves are drawn with a 0.2mm stroke, crossings as small circles.
"""

from typing import List, Sequence, Tuple

import svgwrite

from avx.bezier import AvCubic
from avx.cubic_intersect import intersect_cubics, self_intersect

OUTPUT_FILE = "data/output/example/svg/din_a4_page_cubic_intersections.svg"

CANVAS_UNIT = "mm"  # Units for CANVAS dimensions
CANVAS_WIDTH = 210  # DIN A4 page width in mm
CANVAS_HEIGHT = 297  # DIN A4 page height in mm

TILE_SIZE = 80  # width and height of one drawing area in mm
TILE_GAP = 10  # distance between drawing areas in mm
MARKER_RADIUS = 1.2  # crossing marker radius in mm

CURVE_PAIRS: List[Tuple[Sequence[Tuple[float, float]], Sequence[Tuple[float, float]]]] = [
    (
        [(0.0, 0.0), (100.0 / 3.0, 100.0), (200.0 / 3.0, -100.0), (100.0, 0.0)],
        [(0.0, 20.0), (40.0, -60.0), (60.0, 60.0), (100.0, -20.0)],
    ),
    (
        [(0.0, 0.0), (0.0, 100.0), (100.0, 100.0), (100.0, 0.0)],
        [(0.0, -30.0), (30.0, 120.0), (70.0, -20.0), (100.0, 90.0)],
    ),
    (
        [(0.0, 0.0), (0.0, 100.0), (100.0, 100.0), (100.0, 0.0)],
        [(0.0, 50.0), (100.0 / 3.0, 50.0), (200.0 / 3.0, 50.0), (100.0, 50.0)],
    ),
]
LOOP = [(0.0, 0.0), (150.0, 100.0), (-50.0, 100.0), (100.0, 0.0)]


def cubic_path_data(cubic: AvCubic, scale: float, offset: Tuple[float, float]) -> str:
    """SVG path data of a cubic mapped into a tile (y axis pointing down)."""
    coords = [(offset[0] + x * scale, offset[1] - y * scale) for x, y in cubic.points]
    (x0, y0), (x1, y1), (x2, y2), (x3, y3) = coords
    return f"M {x0:g} {y0:g} C {x1:g} {y1:g} {x2:g} {y2:g} {x3:g} {y3:g}"


def draw_tile(
    dwg: svgwrite.Drawing,
    cubics: Sequence[AvCubic],
    crossings: Sequence[Tuple[float, float]],
    origin: Tuple[float, float],
) -> None:
    """Draw the cubics and the crossing markers into the tile at origin (top left, mm)."""
    box = cubics[0].bounds()
    for cubic in cubics[1:]:
        box = box.union(cubic.bounds())
    scale = TILE_SIZE / max(box.size, 1e-9)
    offset = (origin[0] - box.xmin * scale, origin[1] + TILE_SIZE + box.ymin * scale)

    dwg.add(dwg.rect(insert=origin, size=(TILE_SIZE, TILE_SIZE), stroke="lightgray", stroke_width=0.1, fill="none"))
    for cubic, color in zip(cubics, ("black", "blue")):
        dwg.add(dwg.path(d=cubic_path_data(cubic, scale, offset), stroke=color, stroke_width=0.2, fill="none"))
    for x, y in crossings:
        dwg.add(
            dwg.circle(
                center=(offset[0] + x * scale, offset[1] - y * scale),
                r=MARKER_RADIUS,
                stroke="red",
                stroke_width=0.2,
                fill="none",
            )
        )


def main(output_file: str = OUTPUT_FILE) -> int:
    """Creates a SVG drawing with one tile per curve pair and one for the loop.
    Returns the number of crossings drawn.
    """
    dwg = svgwrite.Drawing(
        output_file,
        size=(f"{CANVAS_WIDTH}{CANVAS_UNIT}", f"{CANVAS_HEIGHT}{CANVAS_UNIT}"),
        viewBox=f"0 0 {CANVAS_WIDTH} {CANVAS_HEIGHT}",
    )

    count = 0
    tiles = [(TILE_GAP + column * (TILE_SIZE + TILE_GAP), TILE_GAP + row * (TILE_SIZE + TILE_GAP))
             for row in range(3) for column in range(2)]
    for (points1, points2), origin in zip(CURVE_PAIRS, tiles):
        cubic1 = AvCubic(points1)
        cubic2 = AvCubic(points2)
        result = intersect_cubics(cubic1, cubic2)
        print(f"{len(result)} crossing(s): {result}")
        crossings = [tuple(point) for point in result.points(cubic1)]
        draw_tile(dwg, [cubic1, cubic2], crossings, origin)
        count += len(crossings)

    loop = AvCubic(LOOP)
    found = self_intersect(loop)
    print(f"self-intersection: {found}")
    crossings = [loop.evaluate(found.t_a)] if found else []
    draw_tile(dwg, [loop], crossings, tiles[len(CURVE_PAIRS)])
    count += len(crossings)

    dwg.saveas(output_file, pretty=True, indent=2)
    return count


if __name__ == "__main__":
    main()
