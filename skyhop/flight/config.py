"""Flight configuration and variant presets."""

from dataclasses import dataclass, replace


@dataclass
class FlightConfig:
    """Physics, collision, spawn and HUD parameters for one variant."""

    # Physics
    gravity: float = 9.81  # m/s²
    thrust_max: float = 25.0  # m/s² at full throttle
    drag: float = 0.02  # Fraction of velocity removed per tick
    angular_rate: float = 3.5  # rad/s per held rotation key
    throttle_rate: float = 1.5  # Throttle units per second

    # Altitude hold assist
    hover_assist: bool = False
    hover_throttle: float = 0.4  # ~gravity / thrust_max
    hover_band: float = 0.08
    hover_assist_gain: float = 3.0  # 1/s, scales descent rate into upward accel

    # Timing
    max_dt: float | None = 0.25  # Longer frames are clamped (None disables)

    # Spawn pose
    spawn_position: tuple[float, float, float] = (0.0, 5.0, 0.0)
    spawn_throttle: float = 0.0

    # Collision
    body_radius: float = 0.3  # Half-extent of the body's bounding box
    ground_clearance: float = 0.5
    ground_contact: str = "land"  # "land" clamps to the ground, "crash" respawns

    # World generation
    obstacle_count: int = 0
    city_extent: float = 200.0  # Half-width of the building grid (meters)
    city_block: float = 25.0  # Grid pitch between building centers
    building_width: tuple[float, float] = (6.0, 14.0)
    building_height: tuple[float, float] = (10.0, 60.0)
    spawn_clearance: float = 15.0  # No buildings within this radius of spawn

    # Goal
    goal: str | None = None  # None, "target" or "gate"
    capture_radius: float = 4.0
    target_region: tuple[float, float, float, float] = (-150.0, 150.0, -150.0, 150.0)
    target_altitude: tuple[float, float] = (8.0, 12.0)  # Narrow vertical band for point targets
    target_half_extent: float = 1.0
    spawn_attempts: int = 100

    # HUD
    hud_units: bool = False

    @classmethod
    def for_variant(cls, name: str, **overrides) -> "FlightConfig":
        """Build the preset for a named variant, with optional field overrides."""
        try:
            preset = VARIANTS[name]
        except KeyError:
            raise KeyError(f"unknown variant {name!r}, expected one of {sorted(VARIANTS)}") from None
        return replace(preset, **overrides)


@dataclass
class SessionConfig:
    """Configuration for the fixed-rate session loop."""

    hz: int = 60  # Tick rate (Hz)
    max_time: float = 60.0  # Max session time (seconds)
    max_captures: int | None = None  # Stop once the score reaches this

    @property
    def dt(self) -> float:
        """Time step in seconds."""
        return 1.0 / self.hz


VARIANTS: dict[str, FlightConfig] = {
    # Bare acro trainer: open field, lands on the ground
    "acro": FlightConfig(),
    # Hover trainer: floating targets and altitude hold assist
    "hover": FlightConfig(
        hover_assist=True,
        hover_band=0.1,
        goal="target",
        capture_radius=4.0,
        target_region=(-60.0, 60.0, -60.0, 60.0),
        target_altitude=(4.0, 8.0),
        hud_units=True,
    ),
    # City flyer: buildings, ground contact is a crash
    "city": FlightConfig(
        body_radius=0.5,
        ground_clearance=0.2,
        ground_contact="crash",
        obstacle_count=80,
        hud_units=True,
    ),
    # Target hunt among buildings
    "targets": FlightConfig(
        body_radius=0.5,
        ground_clearance=0.3,
        ground_contact="crash",
        obstacle_count=60,
        goal="target",
        capture_radius=4.0,
        hud_units=True,
    ),
    # Gate race among buildings
    "gates": FlightConfig(
        body_radius=0.5,
        ground_clearance=0.3,
        ground_contact="crash",
        hover_assist=True,
        hover_band=0.05,
        obstacle_count=60,
        goal="gate",
        capture_radius=5.0,
        target_altitude=(6.0, 8.0),
        target_half_extent=3.0,
        hud_units=True,
    ),
}
