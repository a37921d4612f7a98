"""
stats.py  –  Per-episode statistics for headless cobra runs.

EpisodeStats collects controller events during one simulated episode
and snapshots the mean agent→player distance every few seconds.  At
the end it prints a formatted summary and can save a distance-trend
line graph via matplotlib.
"""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)

import matplotlib
matplotlib.use("Agg")  # headless backend, runs without a display
import matplotlib.pyplot as plt

# Distance snapshot interval (simulated seconds)
_SNAPSHOT_INTERVAL = 2.0


class EpisodeStats:
    """Tracks events for one episode.

    Attributes tracked:
        ticks              – int
        sim_time           – float (scaled seconds)
        hard_escapes       – int
        catches            – int   (player-caught events)
        contacts           – int   (ticks with any agent touching the player)
        shots              – int
        projectile_hits    – int
        slow_motion_uses   – int
        difficulty_level   – float (level at the end of the episode)
        distance_history   – list[float]
    """

    def __init__(self, episode: int = 1):
        self.episode = episode
        self.ticks: int = 0
        self.sim_time: float = 0.0
        self.hard_escapes: int = 0
        self.catches: int = 0
        self.contacts: int = 0
        self.shots: int = 0
        self.projectile_hits: int = 0
        self.slow_motion_uses: int = 0
        self.difficulty_level: float = 1.0

        self.distance_history: list[float] = []
        self._distance_sum: float = 0.0
        self._distance_samples: int = 0
        self._window_sum: float = 0.0
        self._window_samples: int = 0
        self._window_timer: float = 0.0

    # ===========================================================
    #  Recorders
    # ===========================================================

    def record_tick(self, dt: float, results, distances):
        """Fold one tick's controller results into the counters."""
        self.ticks += 1
        self.sim_time += dt
        touching = False
        for result in results:
            if result.escaped:
                self.hard_escapes += 1
            if result.player_caught:
                self.catches += 1
            if result.fired:
                self.shots += 1
            touching = touching or result.contact
        if touching:
            self.contacts += 1

        if distances:
            mean = sum(distances) / len(distances)
            self._distance_sum += mean
            self._distance_samples += 1
            self._window_sum += mean
            self._window_samples += 1

        self._window_timer += dt
        if self._window_timer >= _SNAPSHOT_INTERVAL:
            self._snapshot()

    def record_projectile_hits(self, count: int):
        self.projectile_hits += count

    def _snapshot(self):
        if self._window_samples:
            self.distance_history.append(self._window_sum / self._window_samples)
        self._window_sum = 0.0
        self._window_samples = 0
        self._window_timer = 0.0

    @property
    def mean_distance(self) -> float:
        return self._distance_sum / max(1, self._distance_samples)

    # ===========================================================
    #  End-of-episode
    # ===========================================================

    def end_episode(self, plot_path: str | None = None, quiet: bool = False):
        """Finalise stats, print the summary, optionally save the graph."""
        # Final snapshot so the graph is never empty
        if self._window_samples or not self.distance_history:
            self._snapshot()
        if not quiet:
            self._print_summary()
        if plot_path:
            self.plot_distance(plot_path)

    def _print_summary(self):
        print("\n" + "=" * 52)
        print(f"  EPISODE {self.episode} SUMMARY")
        print("=" * 52)
        print(f"  Ticks            : {self.ticks}")
        print(f"  Simulated time   : {self.sim_time:.1f}s")
        print(f"  Difficulty level : {self.difficulty_level:.2f}")
        print("-" * 52)
        print(f"  Player caught    : {self.catches}")
        print(f"  Contact ticks    : {self.contacts}")
        print(f"  Shots fired      : {self.shots}")
        print(f"  Projectile hits  : {self.projectile_hits}")
        print(f"  Hard escapes     : {self.hard_escapes}")
        print(f"  Slow-mo uses     : {self.slow_motion_uses}")
        print(f"  Mean distance    : {self.mean_distance:.2f}")
        print("=" * 52 + "\n")

    def plot_distance(self, path: str):
        """Save a line graph of distance_history to *path*."""
        if not self.distance_history:
            return

        x = [i * _SNAPSHOT_INTERVAL for i in range(len(self.distance_history))]
        fig, ax = plt.subplots()
        ax.plot(x, self.distance_history, marker="o")
        ax.set_xlabel("Time (seconds)")
        ax.set_ylabel("Mean distance to player")
        ax.set_title(f"Pursuit trend  -  episode {self.episode}")
        ax.grid(True)

        fig.savefig(path, dpi=100, bbox_inches="tight")
        plt.close(fig)
        logger.info("Distance graph saved to %s", path)

    def as_dict(self) -> dict:
        return {
            "episode":          self.episode,
            "ticks":            self.ticks,
            "sim_time":         round(self.sim_time, 2),
            "hard_escapes":     self.hard_escapes,
            "catches":          self.catches,
            "contacts":         self.contacts,
            "shots":            self.shots,
            "projectile_hits":  self.projectile_hits,
            "slow_motion_uses": self.slow_motion_uses,
            "difficulty_level": round(self.difficulty_level, 2),
            "mean_distance":    round(self.mean_distance, 3),
            "distance_history": [round(d, 3) for d in self.distance_history],
        }
