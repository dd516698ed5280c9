from __future__ import annotations

from panda3d.bullet import (
    BulletBoxShape,
    BulletRigidBodyNode,
    BulletSphereShape,
    BulletTriangleMesh,
    BulletTriangleMeshShape,
    BulletWorld,
)
from panda3d.core import BitMask32, LVector3f, NodePath, Point3, TransformState

from chasecam.common.aabb import AABB

# Static level geometry. Camera probes only ever test against this bit.
WORLD_MASK = BitMask32.bit(0)
# Cars and other dynamic actors; world-only probes skip them.
VEHICLE_MASK = BitMask32.bit(1)


class CollisionWorld:
    """Bullet world used for camera collision probes (sphere sweeps) + static scene bodies."""

    def __init__(
        self,
        *,
        aabbs: list[AABB] | None = None,
        triangles: list[list[float]] | None = None,
        render: NodePath | None = None,
    ) -> None:
        self._bworld = BulletWorld()
        # Nothing here is simulated; the world only answers queries.
        self._bworld.setGravity(LVector3f(0, 0, 0))
        self._root = render if render is not None else NodePath("chasecam-collision-root")

        self._static_bodies: list[BulletRigidBodyNode] = []
        self._static_nodes: list[NodePath] = []
        self._vehicle_nodes: list[NodePath] = []
        self._sweep_shape: BulletSphereShape | None = None
        self._sweep_radius = -1.0

        if triangles:
            self.add_triangles(triangles)
        for box in aabbs or []:
            self.add_box(box)

    @property
    def static_body_count(self) -> int:
        return len(self._static_bodies)

    def add_triangles(self, triangles: list[list[float]]) -> None:
        tri_mesh = BulletTriangleMesh()
        added = 0
        for tri in triangles:
            if len(tri) != 9:
                continue
            p0 = Point3(float(tri[0]), float(tri[1]), float(tri[2]))
            p1 = Point3(float(tri[3]), float(tri[4]), float(tri[5]))
            p2 = Point3(float(tri[6]), float(tri[7]), float(tri[8]))
            tri_mesh.addTriangle(p0, p1, p2, False)
            added += 1
        if added == 0:
            return

        shape = BulletTriangleMeshShape(tri_mesh, dynamic=False)
        body = BulletRigidBodyNode("static-triangle-mesh")
        body.setMass(0.0)
        body.addShape(shape)
        np = self._root.attachNewNode(body)
        np.setCollideMask(WORLD_MASK)
        self._bworld.attachRigidBody(body)
        self._static_bodies.append(body)
        self._static_nodes.append(np)

    def add_box(self, box: AABB) -> None:
        half = box.half_extents
        center = box.center
        shape = BulletBoxShape(LVector3f(float(half.x), float(half.y), float(half.z)))
        body = BulletRigidBodyNode("static-block")
        body.setMass(0.0)
        body.addShape(shape)
        np = self._root.attachNewNode(body)
        np.setPos(float(center.x), float(center.y), float(center.z))
        np.setCollideMask(WORLD_MASK)
        self._bworld.attachRigidBody(body)
        self._static_bodies.append(body)
        self._static_nodes.append(np)

    def add_vehicle_box(self, *, half_extents: LVector3f, pos: LVector3f) -> NodePath:
        """Register a car body on the vehicle mask so camera probes pass through it."""

        shape = BulletBoxShape(LVector3f(half_extents))
        body = BulletRigidBodyNode("vehicle-body")
        body.setMass(0.0)
        body.addShape(shape)
        np = self._root.attachNewNode(body)
        np.setPos(LVector3f(pos))
        np.setCollideMask(VEHICLE_MASK)
        self._bworld.attachRigidBody(body)
        self._vehicle_nodes.append(np)
        return np

    def _sphere(self, radius: float) -> BulletSphereShape:
        r = max(0.01, float(radius))
        if self._sweep_shape is None or abs(r - self._sweep_radius) > 1e-6:
            self._sweep_shape = BulletSphereShape(r)
            self._sweep_radius = r
        return self._sweep_shape

    def sweep_closest(self, from_pos: LVector3f, to_pos: LVector3f, radius: float):
        return self._bworld.sweepTestClosest(
            self._sphere(radius),
            TransformState.makePos(from_pos),
            TransformState.makePos(to_pos),
            WORLD_MASK,
            0.0,
        )

    def probe(self, start: LVector3f, end: LVector3f, radius: float) -> LVector3f:
        """Furthest sphere center reachable from `start` toward `end` without entering world geometry."""

        a = LVector3f(start)
        b = LVector3f(end)
        delta = b - a
        if delta.lengthSquared() <= 1e-12:
            return b
        hit = self.sweep_closest(a, b, radius)
        if not hit.hasHit():
            return b
        frac = max(0.0, min(1.0, float(hit.getHitFraction())))
        return a + delta * frac

