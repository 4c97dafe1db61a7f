"""Reading and writing COCO-style JSON annotations."""

from __future__ import annotations

import json
import logging
import shutil
from datetime import date
from pathlib import Path
from typing import Any, Sequence

from .boundingbox import BoundingBox, Rect
from .dataset import BaseImporter, LabelledDataset, StrPath
from .exporting import BaseExporter, image_size

log = logging.getLogger(__name__)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _json_int(value: Any) -> int:
    """Integer value of a JSON number; non-integral or non-numeric values give 0."""
    if not _is_number(value):
        return 0
    number = float(value)
    return int(number) if number.is_integer() else 0


def _json_float(value: Any) -> float:
    return float(value) if _is_number(value) else 0.0


class CocoExporter(BaseExporter):
    """Copies images and writes ``train.json`` and ``val.json`` in COCO layout."""

    def __init__(self, dataset: LabelledDataset) -> None:
        super().__init__(dataset)
        self.image_id = 0
        self.label_id = 0

    def process(self) -> None:
        """Write the train and validation sets, numbering images and labels across both."""
        self.image_id = 0
        self.label_id = 0
        self._process_images(self.train_folder, "train", self.train_set)
        self._process_images(self.val_folder, "val", self.validation_set)

    def _categories(self) -> list[dict[str, Any]]:
        return [
            {"id": self.dataset.class_id(name), "name": name, "supercategory": name}
            for name in self.dataset.classes()
        ]

    def _output_name(self, folder: Path, stem: str, extension: str) -> Path:
        candidate = folder / f"{self.filename_prefix}{stem}.{extension}"
        dupe = 1
        while candidate.exists():
            candidate = folder / f"{self.filename_prefix}{stem}_{dupe}.{extension}"
            dupe += 1
        return candidate

    def _process_images(
        self, folder: Path | None, label_filename: str, images: Sequence[str]
    ) -> None:
        if self.output_folder is None:
            raise ValueError("output folder has not been set")
        if images and folder is None:
            raise ValueError(f"no output folder for the {label_filename} set")

        today = date.today()
        image_array: list[dict[str, Any]] = []
        annotations: list[dict[str, Any]] = []

        for image_path in images:
            labels = self.dataset.labels(image_path)
            if not self.export_unlabelled and not labels:
                log.debug("%s is unlabelled", image_path)
                continue

            source = self.dataset.root / image_path
            target = self._output_name(Path(folder), Path(image_path).stem, Path(image_path).suffix[1:])

            try:
                width, height = image_size(source)
            except OSError:
                log.warning("Failed to open image %s", source)
                continue

            try:
                shutil.copyfile(source, target)
            except OSError:
                log.warning("Failed to copy image %s", target)

            image_array.append(
                {
                    "id": self.image_id,
                    "width": width,
                    "height": height,
                    "file_name": str(target),
                    "license": 0,
                    "flickr_url": "",
                    "coco_url": "",
                    "date_captured": today.isoformat(),
                }
            )

            for label in labels:
                rect = label.rect
                corners = (rect.top_left, rect.top_right, rect.bottom_right, rect.bottom_left)
                segmentation = [str(v) for corner in corners for v in corner]
                annotations.append(
                    {
                        "id": self.label_id,
                        "image_id": self.image_id,
                        "category_id": label.classid,
                        "segmentation": [segmentation],
                        "area": rect.width * rect.height,
                        "bbox": [str(rect.x), str(rect.y), str(rect.width), str(rect.height)],
                        "iscrowd": 0,
                    }
                )
                self.label_id += 1

            self.image_id += 1

        document = {
            "info": {
                "year": today.year,
                "version": "1",
                "description": "Description",
                "contributor": "Contributor",
                "date_created": today.isoformat(),
                "url": "",
            },
            "images": image_array,
            "annotations": annotations,
            "license": [{"id": 0, "name": "", "url": ""}],
            "categories": self._categories(),
        }

        out_path = Path(self.output_folder) / f"{label_filename}.json"
        with open(out_path, "w", encoding="utf-8") as fh:
            json.dump(document, fh, indent=4, sort_keys=True)


class CocoImporter(BaseImporter):
    """Reads a COCO JSON annotation file into a dataset."""

    def import_annotations(self, annotation_file: StrPath, image_folder: StrPath) -> None:
        """Add the categories, images and boxes of ``annotation_file``.

        Image file names are resolved against ``image_folder``.
        """
        log.debug("Loading COCO JSON")
        with open(annotation_file, encoding="utf-8") as fh:
            document = json.load(fh)
        if not isinstance(document, dict):
            raise ValueError("COCO annotation file must hold a JSON object")

        if "categories" not in document:
            raise ValueError("Categories not found")

        classes: dict[int, str] = {}
        class_names: list[str] = []
        for item in document["categories"] or []:
            if not isinstance(item, dict):
                continue
            name = item.get("name")
            item_id = item.get("id")
            if not isinstance(name, str) or not _is_number(item_id):
                continue
            classes[_json_int(item_id)] = name
            if name not in class_names:
                class_names.append(name)

        for name in class_names:
            if name:
                self.dataset.add_class(name)

        if "images" not in document:
            raise ValueError("No images found")

        folder = Path(image_folder).absolute()
        image_list: list[str] = []
        label_list: list[list[BoundingBox]] = []
        image_index: dict[int, int] = {}
        image_map: dict[int, str] = {}
        for image in document["images"] or []:
            if not isinstance(image, dict):
                continue
            file_name = image.get("file_name")
            file_id = image.get("id")
            if not isinstance(file_name, str) or not _is_number(file_id):
                continue
            abs_name = str(folder / file_name)
            key = _json_int(file_id)
            image_map[key] = abs_name
            image_index[key] = len(image_list)
            image_list.append(abs_name)
            label_list.append([])

        if "annotations" not in document:
            raise ValueError("No annotations found")

        for annotation in document["annotations"] or []:
            if not isinstance(annotation, dict):
                continue
            image_id = annotation.get("image_id")
            category_id = annotation.get("category_id")
            if not _is_number(image_id) or not _is_number(category_id):
                continue

            key = _json_int(image_id)
            image_filename = image_map.get(key, "")
            bbox = annotation.get("bbox")
            if not isinstance(bbox, list):
                log.warning("No bounding box found for %s", key)
                continue
            if len(bbox) != 4:
                continue

            x, y, w, h = (int(_json_float(v)) for v in bbox)
            if w == 0:
                log.warning("Bounding box for %s has zero width", image_filename)
                continue
            if h == 0:
                log.warning("Bounding box for %s has zero height", image_filename)
                continue
            if key not in image_index:
                log.warning("Annotation refers to unknown image id %s", key)
                continue

            classname = classes.get(int(_json_float(category_id)), "")
            label_list[image_index[key]].append(
                BoundingBox(
                    rect=Rect.from_xywh(x, y, w, h),
                    classname=classname,
                    classid=self.dataset.class_id(classname) or 0,
                )
            )

        self.dataset.add_labelled_assets(image_list, label_list)