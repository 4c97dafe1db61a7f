"""Reading and writing Darknet (YOLO) label files."""

from __future__ import annotations

import logging
import math
import shutil
from pathlib import Path
from typing import Iterable, Sequence

from .boundingbox import BoundingBox, rect_from_points
from .dataset import BaseImporter, StrPath, read_lines
from .exporting import BaseExporter, ExportSplit, image_size

log = logging.getLogger(__name__)


def _simplify(text: str) -> str:
    return " ".join(text.split())


def _clamp(value: float, low: float, high: float) -> float:
    return min(max(value, low), high)


def _to_int(text: str) -> int:
    try:
        return int(text)
    except ValueError:
        return 0


def _to_float(text: str) -> float:
    try:
        number = float(text)
    except ValueError:
        return 0.0
    return number if math.isfinite(number) else 0.0


def _half(value: int) -> int:
    """Integer division by two, truncating toward zero."""
    return int(value / 2)


class DarknetExporter(BaseExporter):
    """Copies images and writes one normalised ``.txt`` label file beside each."""

    def __init__(self, dataset) -> None:
        super().__init__(dataset)
        self.id_map: dict[str, int] = {}

    def generate_label_ids(self, names_file: StrPath) -> None:
        """Number the classes of a names file from zero, by line order."""
        self.id_map = {}
        try:
            lines = Path(names_file).read_text(encoding="utf-8").splitlines()
        except OSError:
            lines = []
        if not lines:
            log.warning("No classes found in names file.")
            return
        for index, name in enumerate(lines):
            self.id_map[_simplify(name).lower()] = index

    def write_labels(
        self,
        image_size: tuple[int, int],
        label_filename: StrPath,
        labels: Iterable[BoundingBox],
    ) -> None:
        """Write a label file, even when there are no labels to put in it."""
        width, height = image_size
        with open(label_filename, "w", encoding="utf-8") as fh:
            for label in labels:
                key = label.classname.lower()
                if key not in self.id_map:
                    log.warning("Couldn't find this label in the names file: %s", key)
                    continue
                cx, cy = label.rect.center
                x = _clamp(cx / width, 0.0, 0.999)
                y = _clamp(cy / height, 0.0, 0.999)
                w = _clamp(label.rect.width / width, 0.0, 0.999)
                h = _clamp(label.rect.height / height, 0.0, 0.999)
                fh.write(f"{self.id_map[key]} {x:g} {y:g} {w:g} {h:g}\n")

    def process(self) -> None:
        self._process_images(self.train_folder, self.train_set, ExportSplit.TRAIN)
        self._process_images(self.val_folder, self.validation_set, ExportSplit.VAL)

    def _process_images(
        self, folder: Path | None, images: Sequence[str], split_type: ExportSplit
    ) -> None:
        if not images:
            return
        if folder is None:
            raise ValueError(f"no output folder for the {split_type.name.lower()} set")
        folder = Path(folder)

        for image_path in images:
            labels = self.dataset.labels(image_path)
            if not self.export_unlabelled and not labels:
                log.debug("%s is unlabelled", image_path)
                continue

            source = Path(image_path)
            extension = source.suffix[1:]
            stem = self.filename_prefix + source.stem
            image_name = f"{stem}.{extension}"
            label_name = f"{stem}.txt"
            dupe = 1
            while (folder / image_name).exists():
                image_name = f"{stem}{dupe}.{extension}"
                label_name = f"{stem}{dupe}.txt"
                dupe += 1

            abs_path = (self.dataset.root / source).resolve()
            try:
                shutil.copyfile(abs_path, folder / image_name)
            except OSError:
                log.warning("Failed to copy image %s", folder / image_name)

            try:
                size = image_size(abs_path)
            except OSError:
                log.error("Failed to load image %s", abs_path)
                continue
            self.write_labels(size, folder / label_name, labels)


class DarknetImporter(BaseImporter):
    """Reads an image list, a names file and per-image Darknet label files."""

    def import_images(
        self, image_list: StrPath, names_file: StrPath, root_folder: StrPath = ""
    ) -> None:
        """Load classes and every listed image with its labels."""
        self.load_classes(names_file)
        filenames = sorted(read_lines(image_list))
        root = str(root_folder)
        if root:
            log.info("Using relative pathnames, relative to: %s", root)

        paths: list[str] = []
        box_lists: list[list[BoundingBox]] = []
        for name in filenames:
            if not name:
                continue
            if root:
                candidate = Path(root) / name
                if not candidate.exists():
                    log.warning("Image %s doesn't exist. Check your root folder.", candidate)
                    continue
                image_path = str(candidate.resolve())
            else:
                if not Path(name).is_absolute():
                    log.warning("Relative image path %s provided, but no root folder", name)
                    continue
                image_path = name
            paths.append(image_path)
            box_lists.append(self.load_labels(image_path))

        self.dataset.add_labelled_assets(paths, box_lists)

    def load_classes(self, names_file: StrPath) -> None:
        """Add every non-blank line of a names file as a class."""
        for name in read_lines(names_file):
            if not name:
                continue
            self.dataset.add_class(name)
            log.info("%s", name)

    def load_labels(self, image_path: StrPath) -> list[BoundingBox]:
        """Read the label file beside an image into pixel-space boxes."""
        path = Path(image_path)
        label_file = path.absolute().parent / (path.name.split(".")[0] + ".txt")
        try:
            width, height = image_size(path)
        except OSError:
            return []
        if width <= 0 or height <= 0:
            return []

        boxes: list[BoundingBox] = []
        for line in read_lines(label_file):
            fields = line.split(" ")
            if len(fields) != 5:
                continue
            classid = _to_int(fields[0]) + 1
            classname = self.dataset.class_name(classid)
            if classname is None:
                log.warning("Class %d not found in names file.", classid)
                classname = ""

            center_x = int(_to_float(fields[1]) * width)
            center_y = int(_to_float(fields[2]) * height)
            box_width = int(_to_float(fields[3]) * width)
            box_height = int(_to_float(fields[4]) * height)
            half_w, half_h = _half(box_width), _half(box_height)

            top_left = (
                min(max(center_x - half_w, 0), width),
                min(max(center_y - half_h, 0), height),
            )
            bottom_right = (
                min(max(center_x + half_w, 0), width),
                min(max(center_y + half_h, 0), height),
            )
            boxes.append(
                BoundingBox(
                    rect=rect_from_points(top_left, bottom_right),
                    classname=classname,
                    classid=classid,
                )
            )
        return boxes