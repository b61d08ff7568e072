# Upstream reports Anthropic model names; the plan actually serves GLM models.
OPUS_DISPLAY_NAME = "GLM-4.7"
SONNET_DISPLAY_NAME = "GLM-4.7"
HAIKU_DISPLAY_NAME = "GLM-4.5-Air"

_FAMILIES = (
    ("Opus", OPUS_DISPLAY_NAME),
    ("Sonnet", SONNET_DISPLAY_NAME),
    ("Haiku", HAIKU_DISPLAY_NAME),
)


def map_model_name(model_name: str) -> str:
    if not model_name:
        return model_name
    for family, display_name in _FAMILIES:
        if family in model_name:
            return display_name
    return model_name
