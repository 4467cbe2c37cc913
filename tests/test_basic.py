"""Basic unit tests for tes3-validator modules."""

from pathlib import Path


class TestPackage:
    """Test package level imports."""

    def test_version(self) -> None:
        """Test the package exposes its version."""
        import tes3_validator

        assert tes3_validator.__version__ == "0.1.0"

    def test_public_names(self) -> None:
        """Test the main entry points can be imported."""
        from tes3_validator import Context, HandlerRegistry, Reporter, Traversal, validate

        assert callable(validate)
        assert Context is not None and HandlerRegistry is not None
        assert Reporter().lines == []
        assert Traversal is not None


class TestSettingsInitialization:
    """Test settings initialization and basic operations."""

    def test_app_settings_init(self, settings_file: Path) -> None:
        """Test AppSettings can be initialized."""
        from tes3_validator.settings import AppSettings

        settings_obj = AppSettings(settings_file=settings_file)
        assert settings_obj is not None

    def test_app_settings_validation(self, settings_file: Path) -> None:
        """Test settings validation returns result."""
        from tes3_validator.settings import AppSettings

        settings_obj = AppSettings(settings_file=settings_file)
        validation = settings_obj.validate()
        assert validation is not None


class TestHandlerRegistry:
    """Test registry construction."""

    def test_core_registry(self) -> None:
        """Test the core handlers are built from packaged data."""
        from tes3_validator import Context, Mode, Reporter, RunOptions, build_registry

        registry = build_registry(Context(mode=Mode.TR), RunOptions(), Reporter())
        assert len(registry.handlers) > 0
