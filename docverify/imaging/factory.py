from docverify.config.settings import Settings
from docverify.imaging.base import BaseImageAnalyzer
from docverify.imaging.example_analyzer import ExampleImageAnalyzer
from docverify.imaging.pillow_analyzer import PillowImageAnalyzer


class ImageAnalyzerFactory:
    """Creates the configured image analyzer, or None when disabled."""

    ADAPTERS: dict[str, type[BaseImageAnalyzer]] = {
        "pillow": PillowImageAnalyzer,
        "example": ExampleImageAnalyzer,
    }

    @classmethod
    def create(cls, settings: Settings) -> BaseImageAnalyzer | None:
        name = settings.image_analyzer.lower()
        if name in ("", "none"):
            return None
        adapter_cls = cls.ADAPTERS.get(name)
        if adapter_cls is None:
            raise ValueError(
                f"Unknown image analyzer '{name}'. Choose from: {[*cls.ADAPTERS, 'none']}"
            )
        return adapter_cls()
