"""3D Matplotlib visualizer for the flight simulator."""

import matplotlib.pyplot as plt
from mpl_toolkits.mplot3d.art3d import Poly3DCollection
import numpy as np

from controls.inputs import InputState
from .body import rotation_matrix
from .step import FrameSnapshot
from .world import Box, ObstacleSet

# World is y-up; matplotlib's 3D axes are z-up, so plot (x, z, y)
FORWARD = np.array([0.0, 0.0, -1.0])


def _to_plot(point) -> tuple[float, float, float]:
    return point[0], point[2], point[1]


def _box_faces(box: Box) -> list[list[tuple[float, float, float]]]:
    (x0, y0, z0), (x1, y1, z1) = box.min_corner, box.max_corner
    corners = [
        (x0, y0, z0), (x1, y0, z0), (x1, y0, z1), (x0, y0, z1),
        (x0, y1, z0), (x1, y1, z0), (x1, y1, z1), (x0, y1, z1),
    ]
    faces = [(0, 1, 2, 3), (4, 5, 6, 7), (0, 1, 5, 4), (2, 3, 7, 6), (1, 2, 6, 5), (0, 3, 7, 4)]
    return [[_to_plot(corners[i]) for i in face] for face in faces]


class FlightVisualizer:
    """Real-time 3D visualizer using Matplotlib; doubles as a keyboard source."""

    def __init__(
        self,
        obstacles: ObstacleSet,
        inputs: InputState | None = None,
        title: str = "SkyHop FPV",
        trail: int = 600,
    ):
        plt.ion()  # Interactive mode on
        self.fig = plt.figure(figsize=(10, 8))
        self.ax = self.fig.add_subplot(111, projection="3d")
        self.ax.set_title(title)

        self.obstacles = obstacles
        self.trail = trail
        self.history: list[tuple[float, float, float]] = []

        # Setup plot elements
        self.path_line, = self.ax.plot([], [], [], 'b-', alpha=0.5, label="Path")
        self.drone_marker, = self.ax.plot([], [], [], 'ro', markersize=8, label="Drone")
        self.front_line, = self.ax.plot([], [], [], 'r-', linewidth=2)
        self.target_marker, = self.ax.plot([], [], [], 'g*', markersize=14, label="Target")
        self.hud = self.fig.text(0.02, 0.95, "", family="monospace")

        # Draw buildings
        self._draw_obstacles()

        # Set persistent axis limits
        self._set_limits()

        if inputs is not None:
            self.fig.canvas.mpl_connect("key_press_event", lambda event: inputs.key_down(event.key))
            self.fig.canvas.mpl_connect("key_release_event", lambda event: inputs.key_up(event.key))

        self.ax.legend()
        self.fig.canvas.draw()
        self.fig.canvas.flush_events()

    def _draw_obstacles(self):
        """Draw every obstacle box as a translucent solid."""
        faces = []
        for box in self.obstacles:
            faces.extend(_box_faces(box))
        if faces:
            self.ax.add_collection3d(Poly3DCollection(faces, facecolor="grey", edgecolor="k", alpha=0.25, linewidths=0.3))

    def _set_limits(self):
        """Initialize axis limits based on the city and spawn area."""
        bounds = self.obstacles.bounds()
        if bounds is None:
            bounds = Box((-50.0, 0.0, -50.0), (50.0, 30.0, 50.0))
        margin = 10
        (x0, y0, z0), (x1, y1, z1) = bounds.min_corner, bounds.max_corner
        self.ax.set_xlim(x0 - margin, x1 + margin)
        self.ax.set_ylim(z0 - margin, z1 + margin)
        self.ax.set_zlim(0, max(y1, 30.0) + margin)

        self.ax.set_xlabel('X (meters)')
        self.ax.set_ylabel('Z (meters)')
        self.ax.set_zlabel('Altitude (meters)')

    def update(self, frame: FrameSnapshot):
        """Update the visualizer with the latest frame."""
        self.history.append(_to_plot(frame.position))
        if len(self.history) > self.trail:
            self.history = self.history[-self.trail:]

        # Update path
        xs, ys, zs = zip(*self.history)
        self.path_line.set_data(xs, ys)
        self.path_line.set_3d_properties(zs)

        # Update drone position
        px, py, pz = _to_plot(frame.position)
        self.drone_marker.set_data([px], [py])
        self.drone_marker.set_3d_properties([pz])

        # Update drone facing direction
        nose = np.array(frame.position) + 3.0 * (rotation_matrix(*frame.orientation) @ FORWARD)
        fx, fy, fz = _to_plot(nose)
        self.front_line.set_data([px, fx], [py, fy])
        self.front_line.set_3d_properties([pz, fz])

        if frame.target is not None:
            tx, ty, tz = _to_plot((frame.target.x, frame.target.y, frame.target.z))
            self.target_marker.set_data([tx], [ty])
            self.target_marker.set_3d_properties([tz])

        hud = f"ALT {frame.telemetry.altitude}  SPD {frame.telemetry.speed}"
        if frame.telemetry.score is not None:
            hud += f"  {frame.telemetry.score}"
        self.hud.set_text(hud)

        # Keep window responsive
        self.fig.canvas.draw()
        self.fig.canvas.flush_events()
        plt.pause(0.001)

    def is_open(self) -> bool:
        """Check if the figure window is still open."""
        return plt.fignum_exists(self.fig.number)

    def close(self):
        """Close the visualizer window."""
        plt.close(self.fig)
