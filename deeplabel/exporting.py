"""Shared machinery for writing a dataset out in a training format."""

from __future__ import annotations

import logging
import random
from abc import ABC, abstractmethod
from enum import IntEnum
from pathlib import Path

from .dataset import LabelledDataset, StrPath

log = logging.getLogger(__name__)


class ExportSplit(IntEnum):
    UNASSIGNED = 0
    TRAIN = 1
    VAL = 2
    TEST = 3


class BaseExporter(ABC):
    """Selects images, splits them into train and validation sets and prepares folders."""

    def __init__(self, dataset: LabelledDataset) -> None:
        self.dataset = dataset
        self.images: list[str] = []
        self.train_set: list[str] = []
        self.validation_set: list[str] = []
        self.output_folder: Path | None = None
        self.train_folder: Path | None = None
        self.train_label_folder: Path | None = None
        self.train_image_folder: Path | None = None
        self.val_folder: Path | None = None
        self.val_label_folder: Path | None = None
        self.val_image_folder: Path | None = None
        self.filename_prefix = ""
        self.validation_split = False
        self.export_unlabelled = False

    def select_images(self, export_unlabelled: bool) -> list[str]:
        """Choose all images or only labelled ones for export."""
        self.export_unlabelled = export_unlabelled
        if export_unlabelled:
            self.images = self.dataset.images()
        else:
            self.images = self.dataset.labelled_images()
        log.debug("Selected %d images", len(self.images))
        return list(self.images)

    def split_data(self, split: float = 1.0, shuffle: bool = False, seed: int = 42) -> None:
        """Put the first ``split`` fraction of images in the validation set, the rest in train."""
        if split < 0 or split > 1:
            raise ValueError("split fraction must be in [0, 1]")
        if shuffle:
            random.Random(seed).shuffle(self.images)
        pivot = int(len(self.images) * split)
        self.validation_set = self.images[:pivot]
        self.train_set = self.images[pivot:]
        if split > 0:
            log.info("%d images selected for train set.", len(self.train_set))
            log.info("%d images selected for validation set.", len(self.validation_set))
        else:
            log.info("%d images selected for output.", len(self.train_set))

    def set_output_folder(self, folder: StrPath, no_subfolders: bool = False) -> None:
        """Create the output folder and, unless told otherwise, train/val subfolders."""
        if not str(folder):
            raise ValueError("output folder must not be empty")
        self.output_folder = Path(folder)
        self.output_folder.mkdir(parents=True, exist_ok=True)

        if no_subfolders:
            out = self.output_folder
            self.train_folder = self.train_label_folder = self.train_image_folder = out
            self.val_folder = self.val_label_folder = self.val_image_folder = out
            return

        self.train_folder = self.output_folder / "train"
        self.train_folder.mkdir(parents=True, exist_ok=True)
        self.train_label_folder = self.train_image_folder = self.train_folder

        if self.validation_split:
            self.val_folder = self.output_folder / "val"
            self.val_folder.mkdir(parents=True, exist_ok=True)
            self.val_label_folder = self.val_image_folder = self.val_folder

    def set_filename_prefix(self, prefix: str) -> None:
        """Set the prefix for output file names; an empty prefix is ignored."""
        if prefix:
            self.filename_prefix = prefix

    @abstractmethod
    def process(self) -> None:
        """Write the train and validation sets."""


def image_size(path: StrPath) -> tuple[int, int]:
    """Return (width, height) of an image file; raise OSError if it cannot be read."""
    from PIL import Image

    with Image.open(path) as image:
        return image.size