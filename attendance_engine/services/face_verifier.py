"""Face verification adapters."""
import time
from typing import List, Sequence

import numpy as np

from attendance_engine.services.verdict import Verdict


class FaceVerifier:
    """Interface: compare a claimed face sample with enrolled descriptors.

    Implementations must be deterministic for identical inputs and must not
    mutate ``enrolled_descriptors``.
    """

    def verify(self, sample: Sequence[float], enrolled_descriptors: List[Sequence[float]],
               threshold: float) -> Verdict:
        raise NotImplementedError


class DescriptorFaceVerifier(FaceVerifier):
    """
    Match a client-computed face descriptor against the enrolled set.

    Faces are processed on the device; the server only receives the
    descriptor vector. Similarity is ``1 - euclidean distance`` to the
    closest enrolled descriptor, clamped at zero.
    """

    def verify(self, sample, enrolled_descriptors, threshold):
        if not enrolled_descriptors:
            return Verdict(matched=False, confidence=0.0, message='No enrolled descriptors')

        try:
            observed = np.asarray(sample, dtype=float)
            enrolled = np.array(enrolled_descriptors, dtype=float)
        except (TypeError, ValueError):
            return Verdict(matched=False, confidence=0.0, message='Malformed face descriptor')

        if observed.ndim != 1 or enrolled.ndim != 2 or enrolled.shape[1] != observed.shape[0]:
            return Verdict(matched=False, confidence=0.0, message='Descriptor dimensions do not match')

        distances = np.linalg.norm(enrolled - observed, axis=1)
        best = float(distances.min())
        similarity = max(0.0, 1.0 - best)
        matched = similarity >= threshold

        return Verdict(
            matched=matched,
            confidence=round(similarity, 4),
            distance=round(best, 4),
            message='Face verification successful' if matched else 'Face verification failed'
        )


class StaticFaceVerifier(FaceVerifier):
    """Deterministic fake returning a fixed verdict, optionally after a delay."""

    def __init__(self, matched: bool = True, confidence: float = 0.95, delay_seconds: float = 0.0):
        self.verdict = Verdict(matched=matched, confidence=confidence, message='Static face verdict')
        self.delay_seconds = delay_seconds
        self.calls: List[tuple] = []

    def verify(self, sample, enrolled_descriptors, threshold) -> Verdict:
        self.calls.append((sample, enrolled_descriptors, threshold))
        if self.delay_seconds:
            time.sleep(self.delay_seconds)
        return self.verdict
