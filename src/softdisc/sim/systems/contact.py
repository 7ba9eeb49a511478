"""Soft-contact force law shared by disc-disc and disc-wall contacts.

Normal force is a linear spring with an overlap-weighted dashpot
(``F = overlap * (k - c * v_n)``, never attractive), so it vanishes at
contact onset. Shear force opposes sliding of the two surfaces at the
contact point and is capped at ``friction * F``.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

from pygame.math import Vector2

from ..utils.math2d import _sign

if TYPE_CHECKING:
    from ..core.particle import Particle
    from ..core.wall import Wall


def normal_force_magnitude(overlap: float, normal_speed: float, repulsion: float, dissipation: float) -> float:
    if overlap <= 0.0:
        return 0.0
    return max(0.0, overlap * (repulsion - dissipation * normal_speed))


def _accumulate_contact(
    particle: Particle,
    nx: float,
    ny: float,
    overlap: float,
    rel_vx: float,
    rel_vy: float,
    other_surface_speed: float,
    repulsion: float,
    dissipation: float,
    friction: float,
    shear_damping: float,
    torque_multiplier: float,
) -> None:
    # (nx, ny) points from the particle's center toward the contact partner.
    normal_speed = rel_vx * nx + rel_vy * ny
    fn = normal_force_magnitude(overlap, normal_speed, repulsion, dissipation)

    tx = -ny
    ty = nx
    sliding = rel_vx * tx + rel_vy * ty - other_surface_speed - particle.omega * particle.radius
    fs = 0.0
    if friction > 0.0 and sliding != 0.0:
        fs = _sign(sliding) * friction * min(fn, shear_damping * abs(sliding))

    normal_x = -nx * fn
    normal_y = -ny * fn
    shear_x = tx * fs
    shear_y = ty * fs
    particle.normal_force.x += normal_x
    particle.normal_force.y += normal_y
    particle.shear_force.x += shear_x
    particle.shear_force.y += shear_y
    particle.force.x += normal_x + shear_x
    particle.force.y += normal_y + shear_y
    particle.torque += torque_multiplier * particle.radius * fs


def particle_contact(
    particle: Particle,
    other: Particle,
    displacement: Vector2 | None = None,
    torque_multiplier: float = 1.0,
) -> bool:
    """Accumulate the force ``other`` exerts on ``particle``.

    ``displacement`` points from ``particle`` to ``other``; pass the
    minimal-image vector under periodic boundaries. Only ``particle`` is
    modified. Returns whether the discs were in contact.
    """

    if displacement is None:
        dx = other.position.x - particle.position.x
        dy = other.position.y - particle.position.y
    else:
        dx = displacement.x
        dy = displacement.y
    reach = particle.radius + other.radius
    dist_sq = dx * dx + dy * dy
    if dist_sq >= reach * reach:
        return False

    dist = math.sqrt(dist_sq)
    if dist > 0.0:
        nx = dx / dist
        ny = dy / dist
    else:
        # Coincident centers: push the pair apart along x, ordered by id.
        nx = 1.0 if particle.id < other.id else -1.0
        ny = 0.0
    overlap = max(0.0, reach - dist)
    _accumulate_contact(
        particle,
        nx,
        ny,
        overlap,
        other.velocity.x - particle.velocity.x,
        other.velocity.y - particle.velocity.y,
        other.omega * other.radius,
        particle.repulsion,
        particle.dissipation,
        particle.friction,
        particle.dissipation,
        torque_multiplier,
    )
    return True


def wall_contact(wall: Wall, particle: Particle, torque_multiplier: float = 1.0) -> bool:
    """Accumulate the force ``wall`` exerts on ``particle``; the wall is untouched."""

    contact = wall.closest_point(particle.position)
    dx = contact.x - particle.position.x
    dy = contact.y - particle.position.y
    dist_sq = dx * dx + dy * dy
    if dist_sq >= particle.radius * particle.radius:
        return False

    dist = math.sqrt(dist_sq)
    if dist > 0.0:
        nx = dx / dist
        ny = dy / dist
    else:
        # Center sits on the wall: push out against the particle's motion.
        normal = wall.normal
        if normal.dot(particle.velocity) < 0.0:
            normal = -normal
        nx = normal.x
        ny = normal.y
    _accumulate_contact(
        particle,
        nx,
        ny,
        max(0.0, particle.radius - dist),
        -particle.velocity.x,
        -particle.velocity.y,
        0.0,
        wall.repulsion,
        wall.dissipation,
        wall.friction,
        wall.gamma,
        torque_multiplier,
    )
    return True
