import unittest

from drivegallery.config import Settings
from drivegallery.dependencies import build_drive_client
from drivegallery.drive import InMemoryDriveClient


class BuildDriveClientTests(unittest.TestCase):
    def test_in_memory_toggle_is_reported_even_with_token(self):
        settings = Settings(
            _env_file=None, use_in_memory_backends=True, refresh_token="token"
        )
        with self.assertLogs("drivegallery.dependencies", level="INFO") as logs:
            client = build_drive_client(settings)
        self.assertIsInstance(client, InMemoryDriveClient)
        self.assertIn("USE_IN_MEMORY_BACKENDS", logs.output[0])
        self.assertNotIn("refresh token", logs.output[0])

    def test_missing_token_falls_back_to_in_memory(self):
        settings = Settings(
            _env_file=None, use_in_memory_backends=False, refresh_token=None
        )
        with self.assertLogs("drivegallery.dependencies", level="WARNING") as logs:
            client = build_drive_client(settings)
        self.assertIsInstance(client, InMemoryDriveClient)
        self.assertIn("No Drive refresh token configured", logs.output[0])


if __name__ == "__main__":
    unittest.main()
