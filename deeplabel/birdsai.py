"""Import of BIRDSAI thermal video sequences and their CSV annotations."""

from __future__ import annotations

import csv
import logging
from pathlib import Path
from typing import Sequence

from .boundingbox import BoundingBox, rect_from_points
from .dataset import BaseImporter, StrPath

log = logging.getLogger(__name__)

# Species codes: -1 unknown, 0 human, 1 elephant, 2 lion, 3 giraffe, 4 dog,
# 5 crocodile, 6 hippo, 7 zebra, 8 rhino. Dataset class ids are species + 2.
_SPECIES_OFFSET = 2
_MIN_FIELDS = 8


def _to_int(text: str) -> int:
    try:
        return int(text.strip())
    except ValueError:
        return 0


def _to_float(text: str) -> float:
    try:
        return float(text.strip())
    except ValueError:
        return 0.0


def _base_name(path: Path) -> str:
    """File name up to the first dot."""
    return path.name.split(".")[0]


def read_annotations(path: StrPath) -> list[list[str]]:
    """Read a BIRDSAI CSV file into rows of stripped fields, skipping blank lines."""
    with open(path, newline="", encoding="utf-8") as fh:
        return [[field.strip() for field in row] for row in csv.reader(fh) if any(f.strip() for f in row)]


class BirdsAIImporter(BaseImporter):
    """Reads sequence folders of frames, each with a ``<sequence>.csv`` annotation file."""

    def import_sequences(self, sequence_folder: StrPath, annotation_folder: StrPath) -> None:
        """Add the frames of every sequence folder that has an annotation file."""
        seq_dir = Path(sequence_folder)
        subfolders = sorted({p.resolve() for p in seq_dir.iterdir() if p.is_dir()}) if seq_dir.is_dir() else []
        if not subfolders:
            log.warning("Couldn't find any sequences in %s", sequence_folder)
            return

        annotation_dir = Path(annotation_folder).absolute()
        for subfolder in subfolders:
            log.info("Checking: %s", subfolder)
            annotation_file = annotation_dir / f"{_base_name(subfolder)}.csv"
            if not annotation_file.is_file():
                log.warning("Failed to find annotation file: %s", annotation_file)
                continue

            labels = read_annotations(annotation_file)
            log.info("Adding annotations from: %s", annotation_file)

            image_list: list[str] = []
            label_list: list[list[BoundingBox]] = []
            for image in sorted(p for p in subfolder.iterdir() if p.is_file()):
                frame_id = _to_int(_base_name(image).split("_")[-1])
                boxes = self.find_boxes(labels, frame_id)
                if not boxes and not self.import_unlabelled:
                    continue
                image_list.append(str(image))
                label_list.append(boxes)

            self.dataset.add_labelled_assets(image_list, label_list)

    def find_boxes(self, labels: Sequence[Sequence[str]], frame_id: int) -> list[BoundingBox]:
        """Return the boxes of annotation rows whose frame number is ``frame_id``.

        Rows are ``frame, id, left, top, width, height, class, species, ...``.
        """
        boxes: list[BoundingBox] = []
        for label in labels:
            if len(label) < _MIN_FIELDS or _to_int(label[0]) != frame_id:
                continue

            classid = _to_int(label[7]) + _SPECIES_OFFSET
            classname = self.dataset.class_name(classid)
            if classname is None:
                log.warning("Class ID %d not found in names file.", classid)
                classname = ""

            left, top = int(_to_float(label[2])), int(_to_float(label[3]))
            width, height = int(_to_float(label[4])), int(_to_float(label[5]))
            boxes.append(
                BoundingBox(
                    rect=rect_from_points((left, top), (left + width, top + height)),
                    classname=classname,
                    classid=classid,
                )
            )
        return boxes