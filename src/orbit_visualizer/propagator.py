"""
Orbit propagation behind a small interface.

The sampler only needs "where is this satellite at this instant"; SGP4,
sidereal time and the inertial to geodetic conversion all come from the
orbit-predictor library.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Dict, Optional, Tuple
import logging
import math

from orbit_predictor.sources import get_predictor_from_tle_lines
from orbit_predictor.predictors import TLEPredictor

from .models import ElementSet

logger = logging.getLogger(__name__)

# (latitude_deg, longitude_deg, altitude_km)
GeodeticPosition = Tuple[float, float, float]


class Propagator(ABC):
    """Computes a satellite's geodetic position at an instant."""

    @abstractmethod
    def geodetic_position(
        self, element_set: ElementSet, when: datetime
    ) -> Optional[GeodeticPosition]:
        """
        Propagate an element set to ``when``.

        Args:
            element_set: Satellite to propagate
            when: UTC instant (timezone-naive)

        Returns:
            Tuple of (latitude_deg, longitude_deg, altitude_km), or None when
            the orbit has no solution at that time (decayed, numerical failure)
        """


class OrbitPredictorPropagator(Propagator):
    """
    Propagator backed by orbit-predictor's TLE predictor (SGP4/SDP4).

    One predictor is built per element set and reused for every instant.
    """

    def __init__(self) -> None:
        self._predictors: Dict[Tuple[str, str], Optional[TLEPredictor]] = {}

    def _predictor_for(self, element_set: ElementSet) -> Optional[TLEPredictor]:
        key = (element_set.line1, element_set.line2)
        if key not in self._predictors:
            try:
                self._predictors[key] = get_predictor_from_tle_lines(
                    [element_set.line1, element_set.line2]
                )
            except Exception as e:
                logger.warning(f"Cannot build predictor for {element_set.name}: {e}")
                self._predictors[key] = None
        return self._predictors[key]

    def geodetic_position(
        self, element_set: ElementSet, when: datetime
    ) -> Optional[GeodeticPosition]:
        predictor = self._predictor_for(element_set)
        if predictor is None:
            return None

        try:
            lat, lon, alt = predictor.get_position(when).position_llh
        except Exception as e:
            logger.debug(f"No solution for {element_set.name} at {when}: {e}")
            return None

        if not all(math.isfinite(value) for value in (lat, lon, alt)):
            logger.debug(f"Non-finite position for {element_set.name} at {when}")
            return None
        return (lat, lon, alt)
