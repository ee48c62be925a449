"""Unified scene manager for coordinating spheres, materials and textures.

This module provides a high-level scene management API that coordinates
sphere storage with material and texture registration. It tracks which
material type (Lambertian, DiffuseLight) each material ID corresponds to,
enabling material dispatch in the path tracer.

The SceneManager maintains:
- A unified material_id space across all material types
- Mapping from material_id to (material_type, type_local_index)
- Texture registration from colors, in-memory images or image files
- High-level methods for adding spheres with materials in one call

Two materials built from identical parameters are still two independent
materials with distinct IDs.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.gpu)
    >>> from src.orrery.scene.manager import SceneManager
    >>> scene = SceneManager()
    >>> tex_id = scene.add_solid_texture((0.8, 0.3, 0.3))
    >>> mat_id = scene.add_lambertian_material(tex_id)
    >>> scene.add_sphere(center=(0, 0, -1), radius=0.5, material_id=mat_id)
"""

import logging
import os
from dataclasses import dataclass
from enum import IntEnum
from typing import Optional, Union

import taichi as ti

from src.orrery.materials.diffuse_light import (
    add_diffuse_light_material,
    clear_diffuse_light_materials,
)
from src.orrery.materials.image_loader import ImageData, load_image
from src.orrery.materials.lambertian import (
    add_lambertian_material,
    clear_lambertian_materials,
)
from src.orrery.materials.textures import (
    MAX_TEXTURES,
    TextureType,
    add_image_texture,
    add_solid_texture,
    clear_textures,
    get_texture_count,
)
from src.orrery.scene.intersection import (
    MAX_SPHERES,
    add_sphere,
    clear_scene,
    get_sphere_count,
)

logger = logging.getLogger(__name__)


class MaterialType(IntEnum):
    """Enumeration of supported material types.

    Used for material dispatch in the path tracer to determine which
    scatter and emit functions to call.
    """

    LAMBERTIAN = 0
    DIFFUSE_LIGHT = 1


# Maximum number of materials across all types
MAX_MATERIALS = 320  # 256 Lambertian + 64 diffuse lights

# material_types[i] stores the MaterialType for material_id i
material_types = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
# material_type_indices[i] stores the type-local index for material_id i
material_type_indices = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
num_materials = ti.field(dtype=ti.i32, shape=())


def _clear_material_tracking() -> None:
    """Clear the material tracking fields."""
    num_materials[None] = 0


@ti.func
def get_material_type(material_id: ti.i32) -> ti.i32:
    """Get the material type for a given material ID.

    Args:
        material_id: The unified material ID.

    Returns:
        The material type as an integer (see MaterialType enum).
        Returns -1 for invalid material IDs.
    """
    result = -1
    if material_id >= 0 and material_id < num_materials[None]:
        result = material_types[material_id]
    return result


@ti.func
def get_material_type_index(material_id: ti.i32) -> ti.i32:
    """Get the type-local index for a given material ID.

    Returns:
        The index into the type-specific material registry, or -1 for
        invalid material IDs.
    """
    result = -1
    if material_id >= 0 and material_id < num_materials[None]:
        result = material_type_indices[material_id]
    return result


@dataclass
class TextureInfo:
    """Information about a registered texture.

    Attributes:
        texture_id: The texture ID.
        texture_type: SOLID or IMAGE.
        source: The color for solid textures, the file path (or "<array>")
            for image textures.
        width: Image width in pixels, 0 for solid or failed textures.
        height: Image height in pixels, 0 for solid or failed textures.
        brightness: Brightness factor of image textures.
    """

    texture_id: int
    texture_type: TextureType
    source: str
    width: int = 0
    height: int = 0
    brightness: float = 1.0


@dataclass
class MaterialInfo:
    """Information about a registered material.

    Attributes:
        material_id: The unified material ID.
        material_type: The type of material.
        type_index: The index within the type-specific material registry.
        texture_id: The albedo (Lambertian) or emission (light) texture.
    """

    material_id: int
    material_type: MaterialType
    type_index: int
    texture_id: int


@dataclass
class SphereInfo:
    """Information about a sphere in the scene.

    Attributes:
        sphere_index: The index in the sphere storage arrays.
        center: The center of the sphere.
        radius: The radius of the sphere.
        material_id: The material ID assigned to the sphere.
        name: Optional label, e.g. the name of a planet.
    """

    sphere_index: int
    center: tuple[float, float, float]
    radius: float
    material_id: int
    name: str = ""


class SceneManager:
    """High-level manager for scene composition.

    Textures, materials and spheres all live in global Taichi fields, so
    there is effectively one scene per process. Constructing a manager
    clears it.

    Attributes:
        textures: Registered textures, indexed by texture ID.
        materials: Registered materials, indexed by material ID.
        spheres: Spheres in the order they were added.
    """

    def __init__(self) -> None:
        self.textures: list[TextureInfo] = []
        self.materials: list[MaterialInfo] = []
        self.spheres: list[SphereInfo] = []
        self._clear_all()

    def _clear_all(self) -> None:
        clear_scene()
        clear_textures()
        clear_lambertian_materials()
        clear_diffuse_light_materials()
        _clear_material_tracking()

    def clear(self) -> None:
        """Remove every texture, material and sphere."""
        self._clear_all()
        self.textures.clear()
        self.materials.clear()
        self.spheres.clear()

    # =========================================================================
    # Texture Management
    # =========================================================================

    def add_solid_texture(self, color: tuple[float, float, float]) -> int:
        """Add a constant-color texture.

        Returns:
            The texture ID.
        """
        texture_id = add_solid_texture(color)
        self.textures.append(
            TextureInfo(
                texture_id=texture_id,
                texture_type=TextureType.SOLID,
                source=str(tuple(color)),
            )
        )
        return texture_id

    def add_image_texture(
        self,
        image: Union[ImageData, str, os.PathLike],
        brightness: float = 1.0,
    ) -> int:
        """Add an image texture from decoded data or from a file.

        A file that cannot be decoded still produces a texture; it renders
        in the cyan diagnostic color.

        Args:
            image: Decoded image data or a path to an image file.
            brightness: Multiplier applied to the normalized texel color.

        Returns:
            The texture ID.

        Raises:
            ValueError: If brightness is negative.
            RuntimeError: If the texture or texel capacity is exceeded.
        """
        if isinstance(image, ImageData):
            data = image
            source = "<array>"
        else:
            data = load_image(image)
            source = os.fspath(image)

        texture_id = add_image_texture(data, brightness)
        self.textures.append(
            TextureInfo(
                texture_id=texture_id,
                texture_type=TextureType.IMAGE,
                source=source,
                width=0 if data.is_empty else data.width,
                height=0 if data.is_empty else data.height,
                brightness=brightness,
            )
        )
        return texture_id

    def get_texture_count(self) -> int:
        """Get the number of textures in the scene."""
        return get_texture_count()

    def get_texture_info(self, texture_id: int) -> Optional[TextureInfo]:
        """Get information about a texture by ID, or None if not found."""
        if 0 <= texture_id < len(self.textures):
            return self.textures[texture_id]
        return None

    # =========================================================================
    # Material Management
    # =========================================================================

    def _check_texture_id(self, texture_id: int) -> None:
        if texture_id < 0 or texture_id >= get_texture_count():
            raise ValueError(f"Invalid texture_id: {texture_id}")

    def _register_material(self, material_type: MaterialType, type_index: int, texture_id: int) -> int:
        material_id = num_materials[None]
        if material_id >= MAX_MATERIALS:
            raise RuntimeError(f"Maximum number of materials ({MAX_MATERIALS}) exceeded")

        material_types[material_id] = int(material_type)
        material_type_indices[material_id] = type_index
        num_materials[None] = material_id + 1

        self.materials.append(
            MaterialInfo(
                material_id=material_id,
                material_type=material_type,
                type_index=type_index,
                texture_id=texture_id,
            )
        )
        return material_id

    def add_lambertian_material(self, texture_id: int) -> int:
        """Add a Lambertian material with the given albedo texture.

        Args:
            texture_id: ID of the albedo texture.

        Returns:
            The unified material ID.

        Raises:
            ValueError: If texture_id is invalid.
            RuntimeError: If the maximum number of materials is exceeded.
        """
        self._check_texture_id(texture_id)
        type_index = add_lambertian_material(texture_id)
        return self._register_material(MaterialType.LAMBERTIAN, type_index, texture_id)

    def add_diffuse_light_material(self, texture_id: int) -> int:
        """Add a diffuse light material with the given emission texture.

        Args:
            texture_id: ID of the emission texture.

        Returns:
            The unified material ID.

        Raises:
            ValueError: If texture_id is invalid.
            RuntimeError: If the maximum number of materials is exceeded.
        """
        self._check_texture_id(texture_id)
        type_index = add_diffuse_light_material(texture_id)
        return self._register_material(MaterialType.DIFFUSE_LIGHT, type_index, texture_id)

    def add_lambertian_color(self, albedo: tuple[float, float, float]) -> int:
        """Add a Lambertian material backed by a new solid texture."""
        return self.add_lambertian_material(self.add_solid_texture(albedo))

    def add_diffuse_light_color(self, emission: tuple[float, float, float]) -> int:
        """Add a diffuse light backed by a new solid texture."""
        return self.add_diffuse_light_material(self.add_solid_texture(emission))

    def get_material_count(self) -> int:
        """Get the total number of materials in the scene."""
        return int(num_materials[None])

    def get_material_info(self, material_id: int) -> Optional[MaterialInfo]:
        """Get information about a material by ID.

        Args:
            material_id: The unified material ID.

        Returns:
            MaterialInfo for the material, or None if not found.
        """
        if 0 <= material_id < len(self.materials):
            return self.materials[material_id]
        return None

    # =========================================================================
    # Sphere Management
    # =========================================================================

    def add_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        material_id: int,
        name: str = "",
    ) -> int:
        """Add a sphere to the scene.

        Args:
            center: The center point of the sphere as (x, y, z).
            radius: The radius of the sphere (non-negative).
            material_id: The unified material ID to assign to the sphere.
            name: Optional label kept in the sphere info.

        Returns:
            The index of the added sphere.

        Raises:
            RuntimeError: If the maximum number of spheres is exceeded.
            ValueError: If material_id is invalid or radius is negative.
        """
        if material_id < 0 or material_id >= num_materials[None]:
            raise ValueError(f"Invalid material_id: {material_id}")

        sphere_index = add_sphere(center, radius, material_id)
        self.spheres.append(
            SphereInfo(
                sphere_index=sphere_index,
                center=(float(center[0]), float(center[1]), float(center[2])),
                radius=radius,
                material_id=material_id,
                name=name,
            )
        )
        if name:
            logger.debug("Added sphere %r at %s, radius %g", name, center, radius)
        return sphere_index

    def add_lambertian_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        albedo: tuple[float, float, float],
    ) -> tuple[int, int]:
        """Add a sphere with a new solid-color Lambertian material.

        Returns:
            Tuple of (sphere_index, material_id).
        """
        material_id = self.add_lambertian_color(albedo)
        sphere_index = self.add_sphere(center, radius, material_id)
        return sphere_index, material_id

    def add_light_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        emission: tuple[float, float, float],
    ) -> tuple[int, int]:
        """Add a sphere with a new solid-color diffuse light material.

        Returns:
            Tuple of (sphere_index, material_id).
        """
        material_id = self.add_diffuse_light_color(emission)
        sphere_index = self.add_sphere(center, radius, material_id)
        return sphere_index, material_id

    def get_sphere_count(self) -> int:
        """Get the number of spheres in the scene."""
        return get_sphere_count()

    def find_sphere(self, name: str) -> Optional[SphereInfo]:
        """Look up a sphere by its label."""
        for sphere in self.spheres:
            if sphere.name == name:
                return sphere
        return None

    # =========================================================================
    # Capacity Information
    # =========================================================================

    @staticmethod
    def get_max_spheres() -> int:
        """Get the maximum number of spheres supported."""
        return MAX_SPHERES

    @staticmethod
    def get_max_materials() -> int:
        """Get the maximum number of materials supported."""
        return MAX_MATERIALS

    @staticmethod
    def get_max_textures() -> int:
        """Get the maximum number of textures supported."""
        return MAX_TEXTURES
