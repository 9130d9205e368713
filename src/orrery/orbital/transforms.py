"""
Geometry and Rotation Helpers

Rotation matrices, the orbital-plane to reference-frame transform builder,
the display-frame correction, and the quaternion arithmetic used by the
spin integrator.

Conventions:
- Vectors are numpy arrays of shape (3,) or (N, 3).
- Rotation matrices act on column vectors (v' = R @ v).
- Quaternions are scalar-first arrays [w, x, y, z].

References:
- Vallado, "Fundamentals of Astrodynamics and Applications", sec. 2.6
- Curtis, "Orbital Mechanics for Engineering Students", ch. 4
"""

import math
from typing import Union

import numpy as np


# Display-frame correction: the host renders with +Y up, while orbital
# elements are referred to the ecliptic with +Z up.
DISPLAY_FRAME_TILT = math.pi / 2


def rotation_x(angle: float) -> np.ndarray:
    """Right-handed rotation matrix about the X axis (radians)"""
    c, s = math.cos(angle), math.sin(angle)
    return np.array([
        [1.0, 0.0, 0.0],
        [0.0, c, -s],
        [0.0, s, c],
    ])


def rotation_z(angle: float) -> np.ndarray:
    """Right-handed rotation matrix about the Z axis (radians)"""
    c, s = math.cos(angle), math.sin(angle)
    return np.array([
        [c, -s, 0.0],
        [s, c, 0.0],
        [0.0, 0.0, 1.0],
    ])


def orbital_to_reference_matrix(longitude_of_ascending_node: float,
                                inclination: float,
                                argument_of_periapsis: float) -> np.ndarray:
    """
    Build the orbital-plane to reference-frame rotation.

    The rotations are composed as Rz(Ω) · Rx(i) · Rz(ω): a point in the
    orbital plane is first rotated about Z by the argument of periapsis,
    then tilted about X by the inclination, then swung about Z by the
    longitude of the ascending node.

    Args:
        longitude_of_ascending_node: Ω in radians
        inclination: i in radians
        argument_of_periapsis: ω in radians

    Returns:
        3x3 rotation matrix
    """
    return (rotation_z(longitude_of_ascending_node)
            @ rotation_x(inclination)
            @ rotation_z(argument_of_periapsis))


def display_frame_matrix() -> np.ndarray:
    """Fixed X+90° rotation mapping the ecliptic frame onto the display frame"""
    return rotation_x(DISPLAY_FRAME_TILT)


def orbital_to_display_matrix(longitude_of_ascending_node: float,
                              inclination: float,
                              argument_of_periapsis: float,
                              display_frame: bool = True) -> np.ndarray:
    """Orbital-plane transform, optionally followed by the display-frame correction"""
    matrix = orbital_to_reference_matrix(longitude_of_ascending_node,
                                         inclination,
                                         argument_of_periapsis)
    if display_frame:
        matrix = display_frame_matrix() @ matrix
    return matrix


def to_scene_units(vector_km: np.ndarray, distance_scale: float) -> np.ndarray:
    """
    Convert kilometers to scene units

    Args:
        vector_km: Vector or array of vectors in km
        distance_scale: Kilometers per scene unit

    Returns:
        Scaled copy of the input
    """
    if not math.isfinite(distance_scale) or distance_scale <= 0:
        raise ValueError(f"Distance scale must be positive and finite, got {distance_scale}")
    return np.asarray(vector_km, dtype=float) / distance_scale


def vector_angle(a: np.ndarray, b: np.ndarray) -> Union[float, np.ndarray]:
    """
    Angle at the origin between vectors (radians)

    Works row-wise on (N, 3) arrays. Zero-length vectors yield an angle of 0.
    """
    a = np.asarray(a, dtype=float)
    b = np.asarray(b, dtype=float)
    denom = np.linalg.norm(a, axis=-1) * np.linalg.norm(b, axis=-1)
    dot = np.sum(a * b, axis=-1)
    with np.errstate(invalid="ignore", divide="ignore"):
        cos_theta = np.where(denom > 0, dot / np.where(denom > 0, denom, 1.0), 1.0)
    return np.arccos(np.clip(cos_theta, -1.0, 1.0))


# Quaternion helpers

def quaternion_identity() -> np.ndarray:
    return np.array([1.0, 0.0, 0.0, 0.0])


def quaternion_from_axis_angle(axis: np.ndarray, angle: float) -> np.ndarray:
    """Unit quaternion for a rotation of `angle` radians about `axis`"""
    axis = np.asarray(axis, dtype=float)
    norm = np.linalg.norm(axis)
    if norm == 0:
        raise ValueError("Rotation axis must be non-zero")
    axis = axis / norm
    half = angle / 2.0
    return np.concatenate(([math.cos(half)], axis * math.sin(half)))


def quaternion_multiply(q1: np.ndarray, q2: np.ndarray) -> np.ndarray:
    """Hamilton product q1 * q2 (apply q2 first, then q1)"""
    w1, x1, y1, z1 = q1
    w2, x2, y2, z2 = q2
    return np.array([
        w1 * w2 - x1 * x2 - y1 * y2 - z1 * z2,
        w1 * x2 + x1 * w2 + y1 * z2 - z1 * y2,
        w1 * y2 - x1 * z2 + y1 * w2 + z1 * x2,
        w1 * z2 + x1 * y2 - y1 * x2 + z1 * w2,
    ])


def quaternion_normalize(q: np.ndarray) -> np.ndarray:
    norm = np.linalg.norm(q)
    if norm == 0:
        raise ValueError("Cannot normalize a zero quaternion")
    return np.asarray(q, dtype=float) / norm


def quaternion_rotate(q: np.ndarray, vector: np.ndarray) -> np.ndarray:
    """Rotate a 3-vector by a unit quaternion"""
    w, x, y, z = q
    conjugate = np.array([w, -x, -y, -z])
    pure = np.concatenate(([0.0], np.asarray(vector, dtype=float)))
    return quaternion_multiply(quaternion_multiply(q, pure), conjugate)[1:]
