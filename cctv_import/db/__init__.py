from .camera_store import CameraStore, InMemoryCameraStore, PostgresCameraStore

__all__ = ["CameraStore", "InMemoryCameraStore", "PostgresCameraStore"]
