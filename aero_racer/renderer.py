"""
Pseudo-3D road renderer.

Depth z runs from 1.6 at the horizon to 0 at the player plane and is mapped to
the screen with a power curve, scale = (1 - z / 1.6) ** 2.5, which stands in for
perspective foreshortening. Everything is drawn back to front; there is no depth
buffer.
"""
import math
from collections import namedtuple

import pygame
import pygame.gfxdraw

HORIZON_Z = 1.6
PERSPECTIVE_EXPONENT = 2.5
PLAYER_SCALE = 0.9
SHIP_WIDTH, SHIP_HEIGHT = 80, 50
DASH_LENGTH, DASH_GAP = 30, 40
DASH_SPEED = 400

COLOR_BG = pygame.Color("#020617")
COLOR_ROAD_FAR = pygame.Color("#0f172a")
COLOR_ROAD_NEAR = pygame.Color("#020617")
COLOR_RAIL = pygame.Color("#3b82f6")
COLOR_LANE_LINE = (59, 130, 246, 51)
COLOR_PARTICLE = (148, 163, 184, 77)
COLOR_HIGHLIGHT = (255, 255, 255, 102)
COLOR_THRUSTER = pygame.Color("#22d3ee")
COLOR_THRUSTER_GLOW = pygame.Color("#06b6d4")
COLOR_SHIP_BODY = pygame.Color("#f8fafc")
COLOR_SHIP_GLOW = pygame.Color("#3b82f6")
COLOR_COCKPIT = pygame.Color("#0f172a")

RoadGeometry = namedtuple(
    "RoadGeometry", ["center_x", "horizon_y", "road_bottom_y", "width_top", "width_bottom"]
)


def _rgba(color, alpha):
    c = pygame.Color(color)
    return (c.r, c.g, c.b, alpha)


def road_geometry(width, height):
    return RoadGeometry(
        center_x=width / 2,
        horizon_y=height * 0.38,
        road_bottom_y=height * 0.95,
        width_top=width * 0.05,
        width_bottom=width * 0.95,
    )


def depth_scale(z):
    return (1 - z / HORIZON_Z) ** PERSPECTIVE_EXPONENT


def project(z, geometry):
    """Map depth z to (screen_y, road_width, scale)."""
    scale = depth_scale(z)
    return _project_scale(scale, geometry)


def _project_scale(scale, geometry):
    y = geometry.horizon_y + (geometry.road_bottom_y - geometry.horizon_y) * scale
    road_width = geometry.width_top + (geometry.width_bottom - geometry.width_top) * scale
    return y, road_width, scale


def lane_offset(lane, road_width):
    """Horizontal offset of a lane centre; lanes are thirds of the road."""
    return (lane - 1) * (road_width / 3)


def render(surface, state, width, height):
    geometry = road_geometry(width, height)
    surface.fill(COLOR_BG)
    _render_particles(surface, state, width, height)
    _render_road(surface, geometry)
    _render_rails(surface, geometry)
    _render_lane_lines(surface, state, geometry)
    _render_obstacles(surface, state, geometry)
    _render_player(surface, state, geometry)


def _render_particles(surface, state, width, height):
    overlay = pygame.Surface((width, height), pygame.SRCALPHA)
    for p in state.particles:
        px, py = p.x * width, p.y * height
        pygame.draw.line(overlay, COLOR_PARTICLE, (px, py), (px, py + p.length))
    surface.blit(overlay, (0, 0))


def _render_road(surface, geometry):
    top = int(geometry.horizon_y)
    bottom = int(geometry.road_bottom_y)
    span = max(1, bottom - top)
    for y in range(top, bottom + 1):
        t = (y - top) / span
        half = (geometry.width_top + (geometry.width_bottom - geometry.width_top) * t) / 2
        color = COLOR_ROAD_FAR.lerp(COLOR_ROAD_NEAR, t)
        pygame.draw.line(surface, color, (geometry.center_x - half, y), (geometry.center_x + half, y))


def _render_rails(surface, geometry):
    overlay = pygame.Surface(surface.get_size(), pygame.SRCALPHA)
    for side in (-1, 1):
        start = (geometry.center_x + side * geometry.width_top / 2, geometry.horizon_y)
        end = (geometry.center_x + side * geometry.width_bottom / 2, geometry.road_bottom_y)
        # Glow halo first, then the bright core
        for glow_width, alpha in ((10, 30), (6, 60)):
            pygame.draw.line(overlay, _rgba(COLOR_RAIL, alpha), start, end, glow_width)
        pygame.draw.line(overlay, COLOR_RAIL, start, end, 2)
    surface.blit(overlay, (0, 0))


def _dashed_line(surface, color, start, end, dash, gap, offset, width=1):
    """Dashed line whose pattern is shifted along the line by `offset` pixels."""
    dx, dy = end[0] - start[0], end[1] - start[1]
    length = math.hypot(dx, dy)
    if length == 0:
        return
    ux, uy = dx / length, dy / length
    period = dash + gap
    d = -(offset % period)
    while d < length:
        a, b = max(d, 0.0), min(d + dash, length)
        if b > a:
            pygame.draw.line(
                surface, color,
                (start[0] + ux * a, start[1] + uy * a),
                (start[0] + ux * b, start[1] + uy * b),
                width,
            )
        d += period


def _render_lane_lines(surface, state, geometry):
    overlay = pygame.Surface(surface.get_size(), pygame.SRCALPHA)
    offset = -state.frame_count * state.speed * DASH_SPEED
    for side in (-1, 1):
        x_top = geometry.center_x + side * geometry.width_top / 6
        x_bottom = geometry.center_x + side * geometry.width_bottom / 6
        _dashed_line(
            overlay, COLOR_LANE_LINE,
            (x_top, geometry.horizon_y), (x_bottom, geometry.road_bottom_y),
            DASH_LENGTH, DASH_GAP, offset, 2,
        )
    surface.blit(overlay, (0, 0))


def _blit_glow(surface, rect, color, spread, alpha):
    glow_rect = rect.inflate(spread * 2, spread * 2)
    if glow_rect.width <= 0 or glow_rect.height <= 0:
        return
    glow = pygame.Surface(glow_rect.size, pygame.SRCALPHA)
    pygame.draw.rect(glow, _rgba(color, alpha), glow.get_rect(), border_radius=int(spread))
    surface.blit(glow, glow_rect.topleft)


def _render_obstacles(surface, state, geometry):
    # Far to near so nearer blocks overlap farther ones
    for obs in sorted(state.obstacles, key=lambda o: o.z, reverse=True):
        y, road_width, _ = project(obs.z, geometry)
        x = geometry.center_x + lane_offset(obs.lane, road_width)
        box_w = (road_width / 4) * 0.9
        box_h = box_w * 1.2
        rect = pygame.Rect(int(x - box_w / 2), int(y - box_h), max(1, int(box_w)), max(1, int(box_h)))
        color = pygame.Color(obs.color)

        _blit_glow(surface, rect, color, max(2, int(box_w * 0.25)), 70)
        pygame.draw.rect(surface, color, rect)

        highlight = pygame.Surface((rect.width, min(4, rect.height)), pygame.SRCALPHA)
        highlight.fill(COLOR_HIGHLIGHT)
        surface.blit(highlight, rect.topleft)


def _rotated(points, origin, degrees):
    rad = math.radians(degrees)
    cos_a, sin_a = math.cos(rad), math.sin(rad)
    ox, oy = origin
    return [
        (int(round(ox + x * cos_a - y * sin_a)), int(round(oy + x * sin_a + y * cos_a)))
        for x, y in points
    ]


def _fill_polygon(surface, points, color):
    pygame.gfxdraw.filled_polygon(surface, points, color)
    pygame.gfxdraw.aapolygon(surface, points, color)


def _render_player(surface, state, geometry):
    p_y, p_road_width, _ = _project_scale(PLAYER_SCALE, geometry)
    p_x = geometry.center_x + lane_offset(state.player_position, p_road_width)
    origin = (p_x, p_y)
    w, h = SHIP_WIDTH, SHIP_HEIGHT

    thrusters = [
        [(-w / 3, 0), (-w / 3 + w / 6, 0), (-w / 3 + w / 6, 10), (-w / 3, 10)],
        [(w / 3 - w / 6, 0), (w / 3, 0), (w / 3, 10), (w / 3 - w / 6, 10)],
    ]
    for thruster in thrusters:
        pts = _rotated(thruster, origin, state.tilt)
        xs, ys = [x for x, _ in pts], [y for _, y in pts]
        glow_rect = pygame.Rect(min(xs), min(ys), max(xs) - min(xs) + 1, max(ys) - min(ys) + 1)
        _blit_glow(surface, glow_rect, COLOR_THRUSTER_GLOW, 8, 90)
        _fill_polygon(surface, pts, COLOR_THRUSTER)

    body = _rotated([(-w / 2, 0), (0, -h), (w / 2, 0), (0, -h * 0.2)], origin, state.tilt)
    halo = pygame.Surface(surface.get_size(), pygame.SRCALPHA)
    pygame.draw.polygon(halo, _rgba(COLOR_SHIP_GLOW, 60), body, 8)
    surface.blit(halo, (0, 0))
    _fill_polygon(surface, body, COLOR_SHIP_BODY)

    cockpit = _rotated([(-w / 5, -h * 0.3), (0, -h * 0.8), (w / 5, -h * 0.3)], origin, state.tilt)
    _fill_polygon(surface, cockpit, COLOR_COCKPIT)
