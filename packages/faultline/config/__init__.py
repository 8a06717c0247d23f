"""Process-wide configuration: logging, stack depth and id classification."""

from __future__ import annotations

from ..classifiers import chain_classifiers, id_contains_classifier, id_pattern_classifier
from ..logging import configure_logging
from ..resolver import set_global_classifier
from ..stack import set_frame_limit
from .loader import ENV_PREFIX, load_settings, read_config_file, read_environment
from .models import (
    DEFAULT_CONFIG_PATH,
    ClassificationSettings,
    FaultlineSettings,
    LoggingSettings,
    StackSettings,
)


def configure(settings: FaultlineSettings | None = None) -> FaultlineSettings:
    """Apply ``settings`` (loaded from the cascade when omitted).

    Installs the stdout log handler, sets the default snapshot depth and,
    when any id rule is configured, replaces the global classifier.
    """
    resolved = settings if settings is not None else load_settings()
    logging_options = resolved.logging
    configure_logging(
        level=logging_options.level,
        json_output=logging_options.json_output,
        include_stacks=logging_options.include_stacks,
        service=logging_options.service,
        environment=logging_options.environment,
    )
    set_frame_limit(resolved.stacks.max_frames)

    rules = resolved.classification
    if rules.id_patterns or rules.id_contains:
        set_global_classifier(
            chain_classifiers(
                id_pattern_classifier(rules.id_patterns),
                id_contains_classifier(rules.id_contains),
            )
        )
    return resolved


__all__ = [
    "ClassificationSettings",
    "configure",
    "DEFAULT_CONFIG_PATH",
    "ENV_PREFIX",
    "FaultlineSettings",
    "load_settings",
    "LoggingSettings",
    "read_config_file",
    "read_environment",
    "StackSettings",
]
