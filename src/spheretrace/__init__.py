"""Monte Carlo path tracer for sphere-only scenes, built on Taichi.

This package renders a still image of a scene made of spheres by casting
jittered rays from a fixed-viewport camera and following each one through
a chain of material scattering events.

Subpackages:
    core: Vector algebra, random streams, rays, the path estimator and renderer
    geometry: Sphere primitive, hit records and the HittableList composite
    materials: Lambertian and metal scattering plus the material registry
    camera: Fixed-viewport camera with primary ray generation
    scene: Scene management, presets and JSON scene configuration
    output: PPM encoding, PNG export and scanline progress reporting

Modules declaring Taichi fields must be imported after ``ti.init()``; see
``spheretrace.cli.init_backend``.
"""

__version__ = "0.1.0"
