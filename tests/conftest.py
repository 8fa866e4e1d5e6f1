"""
Pytest configuration for local imports and shared fakes.
"""

# Standard Library
import os
import sys

import pytest

#============================================


def _ensure_repo_on_path() -> None:
	"""
	Ensure the repository root is on sys.path.
	"""
	repo_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
	if repo_root not in sys.path:
		sys.path.insert(0, repo_root)


_ensure_repo_on_path()


class FixedWidthFont:
	"""
	Fake font where every character is half an em wide.
	"""

	def __init__(self, em_ratio: float = 0.5) -> None:
		self.em_ratio = em_ratio
		self.calls = 0

	def width_of_text_at_size(self, text: str, size: float) -> float:
		self.calls += 1
		return len(text) * size * self.em_ratio


class CountingEmbedder:
	"""
	Fake image embedder that rejects payloads starting with b"bad".
	"""

	def __init__(self) -> None:
		self.calls: list[tuple[bytes, str]] = []

	def embed(self, data: bytes, mime_kind: str) -> str:
		# imported lazily so the sys.path fix above runs first
		import label_sheet_composer.compose

		self.calls.append((data, mime_kind))
		if data.startswith(b"bad"):
			raise label_sheet_composer.compose.ImageEmbedError("not an image")
		return f"handle-{len(self.calls)}"


@pytest.fixture
def fixed_font() -> FixedWidthFont:
	return FixedWidthFont()


@pytest.fixture
def counting_embedder() -> CountingEmbedder:
	return CountingEmbedder()
