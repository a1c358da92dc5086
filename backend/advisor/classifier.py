"""
Optional text-classification backend for the priority advisor.

The advisor works entirely from keyword and deadline heuristics; a text
classifier only adds a small boost when it detects urgency-related emotion.
Loading a model is opportunistic: if no backend can be loaded the adapter
settles as unavailable and every classification yields no result.

Backends are plain loader callables returning a ``classify(text)`` callable
whose output is a best-first list of ``{"label": str, "score": float}``
mappings, the shape produced by a Hugging Face ``text-classification``
pipeline.
"""

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, List, Optional, Sequence


logger = logging.getLogger(__name__)


DEFAULT_MODEL = "cardiffnlp/twitter-roberta-base-emotion-multilabel-latest"

Classifier = Callable[[str], Any]
Loader = Callable[[], Classifier]


# ==================== Errors ====================

class ClassifierLoadFailure(Exception):
    """No backend could be loaded for the text classifier."""


class ClassifierInvocationFailure(Exception):
    """A single inference call on a loaded backend failed."""


# ==================== Status & Results ====================

class ClassifierStatus(str, Enum):
    """Lifecycle of the classifier adapter. Transitions happen at most once."""
    UNINITIALIZED = "uninitialized"
    READY = "ready"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class ClassificationResult:
    """Top label produced by the classifier."""
    label: str
    score: float


# ==================== Hugging Face loaders ====================

def gpu_half_precision_loader(model: str = DEFAULT_MODEL) -> Loader:
    """Loader for a GPU pipeline with float16 weights."""
    def load() -> Classifier:
        try:
            import torch
            from transformers import pipeline
        except ImportError as e:
            raise ClassifierLoadFailure(f"transformers/torch not installed: {e}") from e

        if not torch.cuda.is_available():
            raise ClassifierLoadFailure("No CUDA device available")

        try:
            return pipeline(
                "text-classification",
                model=model,
                device=0,
                torch_dtype=torch.float16,
            )
        except Exception as e:
            raise ClassifierLoadFailure(f"GPU pipeline failed for {model}: {e}") from e

    return load


def cpu_loader(model: str = DEFAULT_MODEL) -> Loader:
    """Loader for a CPU pipeline with the model's default precision."""
    def load() -> Classifier:
        try:
            from transformers import pipeline
        except ImportError as e:
            raise ClassifierLoadFailure(f"transformers not installed: {e}") from e

        try:
            return pipeline("text-classification", model=model, device=-1)
        except Exception as e:
            raise ClassifierLoadFailure(f"CPU pipeline failed for {model}: {e}") from e

    return load


def default_loaders(model: str = DEFAULT_MODEL, prefer_gpu: bool = True) -> List[Loader]:
    """Loaders in preference order: GPU half precision first, then CPU."""
    loaders = [cpu_loader(model)]
    if prefer_gpu:
        loaders.insert(0, gpu_half_precision_loader(model))
    return loaders


# ==================== Adapter ====================

class ClassifierAdapter:
    """
    Uniform, never-raising wrapper around an optional text classifier.

    The adapter is meant to be shared per process. ``initialize()`` is
    serialized: the first caller tries each loader in order and every later
    caller observes the settled status. There are no retries once the status
    is READY or UNAVAILABLE.
    """

    def __init__(self, loaders: Optional[Sequence[Loader]] = None, enabled: bool = True):
        """
        Args:
            loaders: Backend loaders tried in order (defaults to GPU then CPU
                     pipelines for the default model)
            enabled: When False, initialize() settles as UNAVAILABLE without
                     attempting any load
        """
        self._loaders = list(loaders) if loaders is not None else default_loaders()
        self._enabled = enabled
        self._classifier: Optional[Classifier] = None
        self._status = ClassifierStatus.UNINITIALIZED
        self._lock = threading.Lock()

    @property
    def status(self) -> ClassifierStatus:
        return self._status

    @property
    def is_ready(self) -> bool:
        return self._status == ClassifierStatus.READY

    def initialize(self) -> ClassifierStatus:
        """Attempt to load a backend once. Never raises."""
        with self._lock:
            if self._status != ClassifierStatus.UNINITIALIZED:
                return self._status

            if not self._enabled:
                logger.info("Text classifier disabled by configuration")
                self._status = ClassifierStatus.UNAVAILABLE
                return self._status

            failures = []
            for loader in self._loaders:
                try:
                    self._classifier = loader()
                except ClassifierLoadFailure as e:
                    failures.append(str(e))
                    continue
                except Exception as e:
                    failures.append(f"{type(e).__name__}: {e}")
                    continue
                self._status = ClassifierStatus.READY
                logger.info("Text classifier initialized successfully")
                return self._status

            self._status = ClassifierStatus.UNAVAILABLE
            logger.warning(
                "Text classifier unavailable, continuing with heuristics only: %s",
                "; ".join(failures) or "no loaders configured",
            )
            return self._status

    def try_classify(self, text: str) -> Optional[ClassificationResult]:
        """
        Classify text with the loaded backend.

        Returns:
            The best-first result, or None when the adapter is not ready, the
            backend produced nothing usable, or the call failed.
        """
        if self._status != ClassifierStatus.READY or self._classifier is None:
            return None

        try:
            return self._invoke(text)
        except ClassifierInvocationFailure as e:
            logger.warning("Text classification failed: %s", e)
            return None

    def _invoke(self, text: str) -> Optional[ClassificationResult]:
        try:
            output = self._classifier(text)
        except Exception as e:
            raise ClassifierInvocationFailure(f"{type(e).__name__}: {e}") from e

        top = _top_result(output)
        if top is None:
            return None

        label = top.get('label')
        if not isinstance(label, str):
            return None
        try:
            score = float(top.get('score', 0.0))
        except (TypeError, ValueError):
            score = 0.0
        return ClassificationResult(label=label, score=score)


def _top_result(output: Any) -> Optional[dict]:
    """Pick the first result from a pipeline output, which may be nested."""
    if isinstance(output, dict):
        return output
    if isinstance(output, (list, tuple)) and output:
        return _top_result(output[0])
    return None
