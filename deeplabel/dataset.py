"""An in-memory collection of labelled images and the shared importer base."""

from __future__ import annotations

import copy
import logging
from os import PathLike
from pathlib import Path
from typing import Sequence

from .boundingbox import BoundingBox

log = logging.getLogger(__name__)

StrPath = str | PathLike


def _simplify(text: str) -> str:
    """Collapse runs of whitespace to single spaces and strip the ends."""
    return " ".join(text.split())


class LabelledDataset:
    """Images, their bounding boxes and the class names they use.

    Class ids start at 1. Image paths are kept as given and are resolved
    against ``root`` when the files themselves are needed.
    """

    def __init__(self, root: StrPath | None = None) -> None:
        self.root = Path(root) if root is not None else Path.cwd()
        self._classes: dict[str, int] = {}
        self._assets: dict[str, list[BoundingBox]] = {}
        self._next_label_id = 1

    def add_class(self, name: str) -> int:
        """Add a class name and return its id; an existing name keeps its id."""
        if not name:
            raise ValueError("class name must not be empty")
        existing = self._classes.get(name)
        if existing is not None:
            return existing
        class_id = len(self._classes) + 1
        self._classes[name] = class_id
        return class_id

    def class_id(self, name: str) -> int | None:
        """Return the id of ``name``, or None if it is not a known class."""
        return self._classes.get(name)

    def class_name(self, class_id: int) -> str | None:
        """Return the name of the class with ``class_id``, or None."""
        for name, known_id in self._classes.items():
            if known_id == class_id:
                return name
        return None

    def add_asset(self, image_path: StrPath) -> bool:
        """Add an image; return False if it was already present."""
        key = str(image_path)
        if key in self._assets:
            return False
        self._assets[key] = []
        return True

    def add_label(self, image_path: StrPath, box: BoundingBox) -> int:
        """Attach a copy of ``box`` to an image and return its new label id."""
        key = str(image_path)
        if key not in self._assets:
            raise KeyError(f"unknown image: {key}")
        stored = copy.deepcopy(box)
        stored.label_id = self._next_label_id
        self._next_label_id += 1
        stored.classid = self._classes.get(stored.classname, stored.classid)
        self._assets[key].append(stored)
        return stored.label_id

    def add_labelled_assets(
        self,
        image_paths: Sequence[StrPath],
        box_lists: Sequence[Sequence[BoundingBox]],
    ) -> None:
        """Add images together with their boxes; images already present are left alone."""
        if len(image_paths) != len(box_lists):
            raise ValueError("image_paths and box_lists must have the same length")
        for image_path, boxes in zip(image_paths, box_lists):
            if self.add_asset(image_path):
                for box in boxes:
                    self.add_label(image_path, box)

    def labels(self, image_path: StrPath) -> list[BoundingBox]:
        """Return copies of the boxes on an image (empty for unknown images)."""
        return copy.deepcopy(self._assets.get(str(image_path), []))

    def images(self) -> list[str]:
        """Return every image path in insertion order."""
        return list(self._assets)

    def labelled_images(self) -> list[str]:
        """Return the image paths that carry at least one box."""
        return [path for path, boxes in self._assets.items() if boxes]

    def classes(self) -> list[str]:
        """Return the class names ordered by id."""
        return sorted(self._classes, key=self._classes.__getitem__)


class BaseImporter:
    """Common state for readers of annotation formats."""

    def __init__(
        self,
        dataset: LabelledDataset,
        import_unlabelled: bool = False,
        root_folder: StrPath = "",
    ) -> None:
        self.dataset = dataset
        self.import_unlabelled = import_unlabelled
        self.root_folder = str(root_folder)

    def add_asset(self, image_path: StrPath, boxes: Sequence[BoundingBox]) -> bool:
        """Add an image with its boxes, honouring ``import_unlabelled``."""
        if not boxes and not self.import_unlabelled:
            return False
        if not self.dataset.add_asset(image_path):
            return False
        for box in boxes:
            self.dataset.add_label(image_path, box)
        return True


def read_lines(path: StrPath) -> list[str]:
    """Return the whitespace-simplified lines of a text file, or [] if it cannot be read."""
    try:
        with open(path, encoding="utf-8", errors="replace") as fh:
            return [_simplify(line) for line in fh]
    except OSError:
        log.debug("Could not read %s", path)
        return []