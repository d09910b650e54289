"""Embedded SVG rasterizer (Pillow only, no external process).

Covers the subset that club crests actually use: basic shapes, paths
(all commands, flattened to polygons), groups with transforms, ``use``
references, solid fills and strokes with opacity. Gradients are painted
with their first stop colour; text, filters, masks and clip paths are
ignored.

Shapes are drawn on a supersampled RGBA canvas and downscaled with
LANCZOS, which gives reasonably smooth edges without an anti-aliasing
rasterizer.
"""

import io
import logging
import math
import re
import xml.etree.ElementTree as ET
from typing import Optional

from PIL import Image, ImageChops, ImageColor, ImageDraw

logger = logging.getLogger(__name__)

DEFAULT_WIDTH = 512
SUPERSAMPLE = 2
# Output bound on either side, before supersampling
MAX_DIMENSION = 4096
CURVE_STEPS = 16
ELLIPSE_STEPS = 72

# Elements whose subtree is never painted directly
SKIPPED_TAGS = {
    "defs", "clipPath", "mask", "symbol", "title", "desc", "metadata", "style",
    "linearGradient", "radialGradient", "pattern", "filter", "marker", "text",
    "script", "foreignObject",
}
INHERITED = ("fill", "stroke", "stroke-width", "fill-opacity", "stroke-opacity", "fill-rule", "visibility")

_NUMBER = r"[-+]?(?:\d*\.\d+|\d+\.?)(?:[eE][-+]?\d+)?"
_NUMBER_RE = re.compile(_NUMBER)
_PATH_TOKEN_RE = re.compile(rf"[MmLlHhVvCcSsQqTtAaZz]|{_NUMBER}")
_TRANSFORM_RE = re.compile(r"(matrix|translate|scale|rotate|skewX|skewY)\s*\(([^)]*)\)")

# Affine matrix (a, b, c, d, e, f): x' = a*x + c*y + e, y' = b*x + d*y + f
IDENTITY = (1.0, 0.0, 0.0, 1.0, 0.0, 0.0)


class SvgRenderError(ValueError):
    """The document could not be parsed as SVG."""


# ---------------------------------------------------------------------------
# Geometry helpers
# ---------------------------------------------------------------------------

def _multiply(m1, m2):
    a1, b1, c1, d1, e1, f1 = m1
    a2, b2, c2, d2, e2, f2 = m2
    return (
        a1 * a2 + c1 * b2,
        b1 * a2 + d1 * b2,
        a1 * c2 + c1 * d2,
        b1 * c2 + d1 * d2,
        a1 * e2 + c1 * f2 + e1,
        b1 * e2 + d1 * f2 + f1,
    )


def _apply(m, x, y):
    a, b, c, d, e, f = m
    return (a * x + c * y + e, b * x + d * y + f)


def _scale_factor(m) -> float:
    a, b, c, d, _, _ = m
    return math.sqrt(abs(a * d - b * c)) or 1.0


def _numbers(text: str) -> list[float]:
    return [float(n) for n in _NUMBER_RE.findall(text or "")]


def parse_length(value: Optional[str]) -> Optional[float]:
    """Parse an SVG length ("12", "12px", "1.5e2"); None for % or garbage."""
    if not value or value.strip().endswith("%"):
        return None
    match = _NUMBER_RE.match(value.strip())
    return float(match.group(0)) if match else None


def parse_transform(text: Optional[str]):
    """Fold a transform list into a single matrix."""
    matrix = IDENTITY
    if not text:
        return matrix
    for name, args in _TRANSFORM_RE.findall(text):
        v = _numbers(args)
        if name == "matrix" and len(v) == 6:
            step = tuple(v)
        elif name == "translate" and v:
            step = (1.0, 0.0, 0.0, 1.0, v[0], v[1] if len(v) > 1 else 0.0)
        elif name == "scale" and v:
            step = (v[0], 0.0, 0.0, v[1] if len(v) > 1 else v[0], 0.0, 0.0)
        elif name == "rotate" and v:
            angle = math.radians(v[0])
            cos, sin = math.cos(angle), math.sin(angle)
            step = (cos, sin, -sin, cos, 0.0, 0.0)
            if len(v) == 3:
                cx, cy = v[1], v[2]
                step = _multiply(_multiply((1.0, 0.0, 0.0, 1.0, cx, cy), step), (1.0, 0.0, 0.0, 1.0, -cx, -cy))
        elif name == "skewX" and v:
            step = (1.0, 0.0, math.tan(math.radians(v[0])), 1.0, 0.0, 0.0)
        elif name == "skewY" and v:
            step = (1.0, math.tan(math.radians(v[0])), 0.0, 1.0, 0.0, 0.0)
        else:
            continue
        matrix = _multiply(matrix, step)
    return matrix


def _ellipse_points(cx, cy, rx, ry, start=0.0, sweep=2 * math.pi, steps=ELLIPSE_STEPS):
    n = max(2, int(steps * abs(sweep) / (2 * math.pi)))
    return [
        (cx + rx * math.cos(start + sweep * i / n), cy + ry * math.sin(start + sweep * i / n))
        for i in range(n + 1)
    ]


def _cubic(p0, p1, p2, p3, steps=CURVE_STEPS):
    points = []
    for i in range(1, steps + 1):
        t = i / steps
        mt = 1 - t
        points.append((
            mt ** 3 * p0[0] + 3 * mt ** 2 * t * p1[0] + 3 * mt * t ** 2 * p2[0] + t ** 3 * p3[0],
            mt ** 3 * p0[1] + 3 * mt ** 2 * t * p1[1] + 3 * mt * t ** 2 * p2[1] + t ** 3 * p3[1],
        ))
    return points


def _quadratic(p0, p1, p2, steps=CURVE_STEPS):
    points = []
    for i in range(1, steps + 1):
        t = i / steps
        mt = 1 - t
        points.append((
            mt ** 2 * p0[0] + 2 * mt * t * p1[0] + t ** 2 * p2[0],
            mt ** 2 * p0[1] + 2 * mt * t * p1[1] + t ** 2 * p2[1],
        ))
    return points


def _arc(p0, rx, ry, phi_deg, large_arc, sweep, p1):
    """Flatten an SVG elliptical arc (endpoint parameterization)."""
    x1, y1 = p0
    x2, y2 = p1
    rx, ry = abs(rx), abs(ry)
    if rx == 0 or ry == 0 or (x1 == x2 and y1 == y2):
        return [p1]

    phi = math.radians(phi_deg)
    cos_phi, sin_phi = math.cos(phi), math.sin(phi)
    dx, dy = (x1 - x2) / 2, (y1 - y2) / 2
    x1p = cos_phi * dx + sin_phi * dy
    y1p = -sin_phi * dx + cos_phi * dy

    # Scale radii up if the endpoints cannot be joined
    lam = (x1p ** 2) / (rx ** 2) + (y1p ** 2) / (ry ** 2)
    if lam > 1:
        rx *= math.sqrt(lam)
        ry *= math.sqrt(lam)

    num = rx ** 2 * ry ** 2 - rx ** 2 * y1p ** 2 - ry ** 2 * x1p ** 2
    den = rx ** 2 * y1p ** 2 + ry ** 2 * x1p ** 2
    coef = math.sqrt(max(0.0, num / den)) if den else 0.0
    if large_arc == sweep:
        coef = -coef
    cxp = coef * rx * y1p / ry
    cyp = -coef * ry * x1p / rx
    cx = cos_phi * cxp - sin_phi * cyp + (x1 + x2) / 2
    cy = sin_phi * cxp + cos_phi * cyp + (y1 + y2) / 2

    def angle(ux, uy, vx, vy):
        return math.atan2(ux * vy - uy * vx, ux * vx + uy * vy)

    theta1 = angle(1, 0, (x1p - cxp) / rx, (y1p - cyp) / ry)
    delta = angle((x1p - cxp) / rx, (y1p - cyp) / ry, (-x1p - cxp) / rx, (-y1p - cyp) / ry)
    if not sweep and delta > 0:
        delta -= 2 * math.pi
    elif sweep and delta < 0:
        delta += 2 * math.pi

    n = max(2, int(CURVE_STEPS * abs(delta) / (math.pi / 2)))
    points = []
    for i in range(1, n + 1):
        t = theta1 + delta * i / n
        ex, ey = rx * math.cos(t), ry * math.sin(t)
        points.append((cos_phi * ex - sin_phi * ey + cx, sin_phi * ex + cos_phi * ey + cy))
    return points


def parse_path(d: str) -> list[tuple[list[tuple[float, float]], bool]]:
    """Flatten path data into ``[(points, closed), ...]`` subpaths."""
    tokens = _PATH_TOKEN_RE.findall(d or "")
    subpaths = []
    current: list = []
    closed = False
    x = y = 0.0
    start = (0.0, 0.0)
    last_ctrl = None
    cmd = None
    i = 0

    def take(n):
        nonlocal i
        chunk = tokens[i:i + n]
        if len(chunk) < n or any(t.isalpha() for t in chunk):
            raise SvgRenderError("truncated path data")
        i += n
        return [float(t) for t in chunk]

    def flush():
        nonlocal current, closed
        if len(current) > 1:
            subpaths.append((current, closed))
        current = []
        closed = False

    while i < len(tokens):
        tok = tokens[i]
        if tok.isalpha():
            cmd = tok
            i += 1
            if cmd in "Zz":
                if current:
                    closed = True
                    flush()
                x, y = start
                last_ctrl = None
                continue
        elif cmd is None:
            raise SvgRenderError("path data must start with a command")

        rel = cmd.islower()
        op = cmd.upper()
        ox, oy = (x, y) if rel else (0.0, 0.0)

        if op == "M":
            mx, my = take(2)
            flush()
            x, y = ox + mx, oy + my
            start = (x, y)
            current = [(x, y)]
            cmd = "l" if rel else "L"
            last_ctrl = None
            continue

        if not current:
            current = [(x, y)]

        if op == "L":
            lx, ly = take(2)
            x, y = ox + lx, oy + ly
            current.append((x, y))
            last_ctrl = None
        elif op == "H":
            (hx,) = take(1)
            x = (x if rel else 0.0) + hx
            current.append((x, y))
            last_ctrl = None
        elif op == "V":
            (vy,) = take(1)
            y = (y if rel else 0.0) + vy
            current.append((x, y))
            last_ctrl = None
        elif op == "C":
            x1, y1, x2, y2, ex, ey = take(6)
            c1, c2, end = (ox + x1, oy + y1), (ox + x2, oy + y2), (ox + ex, oy + ey)
            current.extend(_cubic((x, y), c1, c2, end))
            last_ctrl = ("C", c2)
            x, y = end
        elif op == "S":
            x2, y2, ex, ey = take(4)
            if last_ctrl and last_ctrl[0] == "C":
                c1 = (2 * x - last_ctrl[1][0], 2 * y - last_ctrl[1][1])
            else:
                c1 = (x, y)
            c2, end = (ox + x2, oy + y2), (ox + ex, oy + ey)
            current.extend(_cubic((x, y), c1, c2, end))
            last_ctrl = ("C", c2)
            x, y = end
        elif op == "Q":
            x1, y1, ex, ey = take(4)
            c1, end = (ox + x1, oy + y1), (ox + ex, oy + ey)
            current.extend(_quadratic((x, y), c1, end))
            last_ctrl = ("Q", c1)
            x, y = end
        elif op == "T":
            ex, ey = take(2)
            if last_ctrl and last_ctrl[0] == "Q":
                c1 = (2 * x - last_ctrl[1][0], 2 * y - last_ctrl[1][1])
            else:
                c1 = (x, y)
            end = (ox + ex, oy + ey)
            current.extend(_quadratic((x, y), c1, end))
            last_ctrl = ("Q", c1)
            x, y = end
        elif op == "A":
            arx, ary, rot, large, sweep, ex, ey = take(7)
            end = (ox + ex, oy + ey)
            current.extend(_arc((x, y), arx, ary, rot, bool(large), bool(sweep), end))
            last_ctrl = None
            x, y = end
        else:
            raise SvgRenderError(f"unsupported path command: {cmd}")

    flush()
    return subpaths


# ---------------------------------------------------------------------------
# Style
# ---------------------------------------------------------------------------

def _local(tag: str) -> str:
    return tag.rsplit("}", 1)[-1] if isinstance(tag, str) else ""


def _style_of(el: ET.Element, inherited: dict) -> dict:
    style = {k: v for k, v in inherited.items() if k in INHERITED}
    own = {}
    for key in (*INHERITED, "opacity", "display", "stop-color"):
        if key in el.attrib:
            own[key] = el.attrib[key]
    for decl in (el.attrib.get("style") or "").split(";"):
        if ":" in decl:
            key, value = decl.split(":", 1)
            own[key.strip()] = value.strip()
    style.update(own)
    # Group opacity multiplies down the tree
    style["opacity"] = str(_float(inherited.get("opacity"), 1.0) * _float(own.get("opacity"), 1.0))
    return style


def _float(value, default: float) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


class _Renderer:
    def __init__(self, root: ET.Element, size: tuple[int, int], base_matrix):
        self.root = root
        self.size = size
        self.base_matrix = base_matrix
        self.canvas = Image.new("RGBA", size, (0, 0, 0, 0))
        self.draw = ImageDraw.Draw(self.canvas, "RGBA")
        self.ids = {el.attrib["id"]: el for el in root.iter() if "id" in el.attrib}

    def color(self, value: Optional[str], opacity: float) -> Optional[tuple]:
        if value is None:
            return None
        value = value.strip()
        if value in ("none", "transparent", ""):
            return None
        if value == "currentColor":
            value = "black"
        if value.startswith("url("):
            value = self._gradient_color(value)
            if value is None:
                return None
        try:
            rgb = ImageColor.getrgb(value)
        except ValueError:
            return None
        alpha = rgb[3] if len(rgb) == 4 else 255
        alpha = int(round(alpha * max(0.0, min(1.0, opacity))))
        if alpha <= 0:
            return None
        return (rgb[0], rgb[1], rgb[2], alpha)

    def _gradient_color(self, ref: str) -> Optional[str]:
        match = re.match(r"url\(\s*#([^)\s]+)\s*\)", ref)
        gradient = self.ids.get(match.group(1)) if match else None
        seen = set()
        while gradient is not None and id(gradient) not in seen:
            seen.add(id(gradient))
            for stop in gradient:
                if _local(stop.tag) == "stop":
                    return _style_of(stop, {}).get("stop-color", "black")
            href = gradient.attrib.get("href") or gradient.attrib.get("{http://www.w3.org/1999/xlink}href")
            gradient = self.ids.get(href[1:]) if href and href.startswith("#") else None
        return None

    # -- traversal ---------------------------------------------------------

    def render(self) -> Image.Image:
        self._walk(self.root, self.base_matrix, {"fill": "black", "opacity": "1"}, depth=0)
        return self.canvas

    def _walk(self, el: ET.Element, matrix, inherited: dict, depth: int) -> None:
        if depth > 64:
            return
        tag = _local(el.tag)
        if tag in SKIPPED_TAGS:
            return
        style = _style_of(el, inherited)
        if style.get("display") == "none":
            return
        matrix = _multiply(matrix, parse_transform(el.attrib.get("transform")))

        if tag in ("svg", "g", "a", "switch"):
            if tag == "svg" and depth > 0:
                x = parse_length(el.attrib.get("x")) or 0.0
                y = parse_length(el.attrib.get("y")) or 0.0
                matrix = _multiply(matrix, (1.0, 0.0, 0.0, 1.0, x, y))
            for child in el:
                self._walk(child, matrix, style, depth + 1)
            return

        if tag == "use":
            href = el.attrib.get("href") or el.attrib.get("{http://www.w3.org/1999/xlink}href") or ""
            target = self.ids.get(href[1:]) if href.startswith("#") else None
            if target is None or target is el:
                return
            x = parse_length(el.attrib.get("x")) or 0.0
            y = parse_length(el.attrib.get("y")) or 0.0
            matrix = _multiply(matrix, (1.0, 0.0, 0.0, 1.0, x, y))
            if _local(target.tag) == "symbol":
                for child in target:
                    self._walk(child, matrix, style, depth + 1)
            else:
                self._walk(target, matrix, style, depth + 1)
            return

        subpaths = self._geometry(tag, el)
        if subpaths and style.get("visibility") not in ("hidden", "collapse"):
            self._paint(subpaths, matrix, style)

    def _geometry(self, tag: str, el: ET.Element):
        a = el.attrib
        if tag == "path":
            return parse_path(a.get("d", ""))
        if tag == "rect":
            x = parse_length(a.get("x")) or 0.0
            y = parse_length(a.get("y")) or 0.0
            w = parse_length(a.get("width")) or 0.0
            h = parse_length(a.get("height")) or 0.0
            if w <= 0 or h <= 0:
                return []
            rx = parse_length(a.get("rx"))
            ry = parse_length(a.get("ry"))
            rx = rx if rx is not None else (ry or 0.0)
            ry = ry if ry is not None else rx
            rx, ry = min(rx, w / 2), min(ry, h / 2)
            if rx <= 0 or ry <= 0:
                return [([(x, y), (x + w, y), (x + w, y + h), (x, y + h)], True)]
            q = math.pi / 2
            points = (
                _ellipse_points(x + w - rx, y + ry, rx, ry, -q, q, 24)
                + _ellipse_points(x + w - rx, y + h - ry, rx, ry, 0, q, 24)
                + _ellipse_points(x + rx, y + h - ry, rx, ry, q, q, 24)
                + _ellipse_points(x + rx, y + ry, rx, ry, 2 * q, q, 24)
            )
            return [(points, True)]
        if tag == "circle":
            r = parse_length(a.get("r")) or 0.0
            if r <= 0:
                return []
            cx = parse_length(a.get("cx")) or 0.0
            cy = parse_length(a.get("cy")) or 0.0
            return [(_ellipse_points(cx, cy, r, r), True)]
        if tag == "ellipse":
            rx = parse_length(a.get("rx")) or 0.0
            ry = parse_length(a.get("ry")) or 0.0
            if rx <= 0 or ry <= 0:
                return []
            cx = parse_length(a.get("cx")) or 0.0
            cy = parse_length(a.get("cy")) or 0.0
            return [(_ellipse_points(cx, cy, rx, ry), True)]
        if tag == "line":
            coords = [parse_length(a.get(k)) or 0.0 for k in ("x1", "y1", "x2", "y2")]
            return [([(coords[0], coords[1]), (coords[2], coords[3])], False)]
        if tag in ("polyline", "polygon"):
            v = _numbers(a.get("points", ""))
            points = list(zip(v[0::2], v[1::2]))
            if len(points) < 2:
                return []
            return [(points, tag == "polygon")]
        return []

    # -- painting ----------------------------------------------------------

    def _paint(self, subpaths, matrix, style: dict) -> None:
        opacity = _float(style.get("opacity"), 1.0)
        fill = self.color(style.get("fill", "black"), opacity * _float(style.get("fill-opacity"), 1.0))
        stroke = self.color(style.get("stroke"), opacity * _float(style.get("stroke-opacity"), 1.0))

        transformed = [([_apply(matrix, px, py) for px, py in pts], closed) for pts, closed in subpaths]
        fillable = [pts for pts, _ in transformed if len(pts) >= 3]

        if fill and fillable:
            if len(fillable) == 1:
                self.draw.polygon(fillable[0], fill=fill)
            else:
                # Overlapping subpaths cancel out (holes in crests, letters)
                mask = Image.new("1", self.size, 0)
                for pts in fillable:
                    sub = Image.new("1", self.size, 0)
                    ImageDraw.Draw(sub).polygon(pts, fill=1)
                    mask = ImageChops.logical_xor(mask, sub)
                layer = Image.new("RGBA", self.size, (0, 0, 0, 0))
                layer.paste(fill, mask=mask)
                self.canvas.alpha_composite(layer)

        if stroke:
            width = _float(style.get("stroke-width"), 1.0) * _scale_factor(matrix)
            width = max(1, int(round(width)))
            for pts, closed in transformed:
                line = pts + [pts[0]] if closed else pts
                self.draw.line(line, fill=stroke, width=width, joint="curve")


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def parse_svg(svg_bytes: bytes) -> ET.Element:
    try:
        root = ET.fromstring(svg_bytes)
    except ET.ParseError as e:
        raise SvgRenderError(f"parse svg: {e}") from e
    if _local(root.tag) != "svg":
        raise SvgRenderError(f"root element is <{_local(root.tag)}>, not <svg>")
    return root


def view_box_of(root: ET.Element) -> tuple[float, float, float, float]:
    """(min_x, min_y, width, height) from ``viewBox``, else ``width``/``height``.

    Raises:
        SvgRenderError: if any of those numbers is infinite or NaN
    """
    values = _numbers(root.attrib.get("viewBox", ""))
    if not all(math.isfinite(v) for v in values):
        raise SvgRenderError("viewBox is not finite")
    if len(values) == 4 and values[2] > 0 and values[3] > 0:
        return tuple(values)
    width = parse_length(root.attrib.get("width")) or 0.0
    height = parse_length(root.attrib.get("height")) or 0.0
    if not (math.isfinite(width) and math.isfinite(height)):
        raise SvgRenderError("width/height is not finite")
    return (0.0, 0.0, max(width, 0.0), max(height, 0.0))


def output_size(view_box: tuple[float, float, float, float], width: int) -> tuple[int, int]:
    """Target pixel size: requested width, height from the view-box aspect ratio.

    Both sides are clamped to ``MAX_DIMENSION``; an extreme aspect ratio
    yields a letterboxed image rather than a huge canvas.
    """
    _, _, vb_w, vb_h = view_box
    target_w = width
    if target_w <= 0:
        target_w = int(min(vb_w, MAX_DIMENSION)) if vb_w > 0 else DEFAULT_WIDTH
    target_w = max(1, min(target_w, MAX_DIMENSION))
    if vb_w > 0 and vb_h > 0:
        target_h = min(target_w * vb_h / vb_w, MAX_DIMENSION)
    else:
        target_h = target_w
    return target_w, max(1, int(round(target_h)))


def render_svg_to_png(svg_bytes: bytes, width: int = DEFAULT_WIDTH) -> bytes:
    """Rasterize an SVG document to PNG bytes.

    Raises:
        SvgRenderError: if the document cannot be parsed
    """
    root = parse_svg(svg_bytes)
    view_box = view_box_of(root)
    target_w, target_h = output_size(view_box, width)

    min_x, min_y, vb_w, vb_h = view_box
    if vb_w <= 0 or vb_h <= 0:
        vb_w, vb_h = float(target_w), float(target_h)

    ss_w, ss_h = target_w * SUPERSAMPLE, target_h * SUPERSAMPLE
    # xMidYMid meet
    scale = min(ss_w / vb_w, ss_h / vb_h)
    offset_x = (ss_w - vb_w * scale) / 2 - min_x * scale
    offset_y = (ss_h - vb_h * scale) / 2 - min_y * scale
    base = (scale, 0.0, 0.0, scale, offset_x, offset_y)

    canvas = _Renderer(root, (ss_w, ss_h), base).render()
    if SUPERSAMPLE > 1:
        canvas = canvas.resize((target_w, target_h), Image.Resampling.LANCZOS)

    output = io.BytesIO()
    canvas.save(output, format="PNG", optimize=True)
    logger.debug(f"Embedded render {target_w}x{target_h} ({len(output.getvalue())} bytes)")
    return output.getvalue()
