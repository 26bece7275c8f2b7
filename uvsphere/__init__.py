"""Project UV-space shapes onto a rotating sphere.

The kernel maps shapes drawn in the unit UV square onto a unit sphere,
rotates it, projects the visible side with an orthographic, perspective
or stereographic camera, and clips the result so that filled shapes end
on the sphere's limb.

Typical use::

    from uvsphere.pipeline import ProjectionConfig, project_shape
    from uvsphere.shapes import Circle
    from uvsphere.sphere import Rotation

    result = project_shape(Circle((0.75, 0.5), 0.1), Rotation.from_degrees(ry=30))
    for path in result.paths:
        ...
"""

__version__ = "0.1.0"
