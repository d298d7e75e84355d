from appforge.modules.preview.coordinator import PreviewCoordinator, REQUIRED_PREVIEW_FILES

__all__ = ["PreviewCoordinator", "REQUIRED_PREVIEW_FILES"]
