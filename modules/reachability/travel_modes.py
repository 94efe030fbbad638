import logging
from typing import Dict, List, Optional, Sequence

from .schemas import ReachabilityOptions, TravelModeState

logger = logging.getLogger(__name__)

DEFAULT_PROFILE = "driving-car"

TRAVEL_MODE_LABELS: Dict[str, str] = {
    "driving-car": "Driving",
    "cycling-regular": "Cycling",
    "foot-walking": "Walking",
    "wheelchair": "Wheelchair",
}


class TravelModeSelector:
    """
    Four profile slots, exactly one active. Disabled slots hold None.
    """

    def __init__(
        self,
        profiles: Sequence[Optional[str]],
        default: Optional[str] = None,
        labels: Optional[Dict[str, str]] = None,
    ):
        slots = list(profiles)[:4] + [None] * max(0, 4 - len(profiles))
        if slots[0] is None:
            slots[0] = DEFAULT_PROFILE
        self._slots: List[Optional[str]] = slots
        self._labels = dict(TRAVEL_MODE_LABELS)
        if labels:
            self._labels.update(labels)

        if default in self.profiles:
            self._active = default
        else:
            if default is not None:
                logger.debug("Default travel mode %s is not configured, using %s", default, slots[0])
            self._active = slots[0]

    @classmethod
    def from_options(cls, options: ReachabilityOptions) -> "TravelModeSelector":
        return cls(
            [
                options.travel_mode_profile_1,
                options.travel_mode_profile_2,
                options.travel_mode_profile_3,
                options.travel_mode_profile_4,
            ],
            default=options.travel_mode_default,
        )

    @property
    def profiles(self) -> List[str]:
        return [p for p in self._slots if p is not None]

    @property
    def active(self) -> str:
        return self._active

    @property
    def active_label(self) -> str:
        return self.label_for(self._active)

    def label_for(self, profile: str) -> str:
        return self._labels.get(profile, profile)

    def set_mode(self, profile: str) -> bool:
        if profile not in self.profiles:
            logger.debug("Rejected unknown travel mode: %s", profile)
            return False
        self._active = profile
        return True

    def select_slot(self, slot: int) -> bool:
        """Activate the profile in slot 1..4."""
        if not 1 <= slot <= len(self._slots):
            return False
        profile = self._slots[slot - 1]
        if profile is None:
            return False
        return self.set_mode(profile)

    def snapshot(self) -> TravelModeState:
        return TravelModeState(
            profile=self._active,
            label=self.active_label,
            available={p: self.label_for(p) for p in self.profiles},
        )
