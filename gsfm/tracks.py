from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, NamedTuple

import numpy as np

image_t = int
feature_t = int
track_t = int


class Observation(NamedTuple):
    """One (image, feature) detection belonging to a track."""
    image_id: image_t
    feature_id: feature_t


@dataclass(eq=False)
class Track:
    """
    A 3D point hypothesis and the image features believed to be its projections.

    `xyz` is only meaningful once `is_initialized` is True; triangulation and
    refinement (outside this package) set both together.
    """
    track_id: track_t
    xyz: np.ndarray = field(default_factory=lambda: np.zeros(3, dtype=np.float64))
    color: np.ndarray = field(default_factory=lambda: np.zeros(3, dtype=np.uint8))  # not used
    is_initialized: bool = False
    observations: List[Observation] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.xyz = np.asarray(self.xyz, dtype=np.float64).reshape(3)
        self.color = np.asarray(self.color, dtype=np.uint8).reshape(3)
        self.observations = [Observation(*o) for o in self.observations]

    def add_observation(self, image_id: image_t, feature_id: feature_t) -> Observation:
        obs = Observation(image_id, feature_id)
        self.observations.append(obs)
        return obs

    def remove_observation(self, obs: Observation) -> None:
        # list.remove semantics: ValueError if the observation is not on this track
        self.observations.remove(Observation(*obs))

    def image_ids(self) -> List[image_t]:
        return [o.image_id for o in self.observations]

    @property
    def length(self) -> int:
        return len(self.observations)

    def __len__(self) -> int:
        return len(self.observations)
