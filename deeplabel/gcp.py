"""Export to the CSV layout used by Google Cloud AutoML Vision."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Sequence, TextIO

from .dataset import LabelledDataset, StrPath
from .exporting import BaseExporter, ExportSplit, image_size

log = logging.getLogger(__name__)


class GCPExporter(BaseExporter):
    """Copies images into ``images/`` and writes ``images/labels.txt``."""

    def __init__(self, dataset: LabelledDataset) -> None:
        super().__init__(dataset)
        self.bucket_uri = ""
        self.image_folder: Path | None = None

    def set_bucket(self, uri: str, local: bool = False) -> None:
        """Set the bucket prefix, adding ``gs://`` unless it is there or paths are local."""
        if not uri.startswith("gs://") and not local:
            self.bucket_uri = f"gs://{uri}"
        else:
            self.bucket_uri = uri

    def set_output_folder(self, folder: StrPath, no_subfolders: bool = False) -> None:
        """Create the output folder and its ``images`` subfolder."""
        if not str(folder):
            raise ValueError("output folder must not be empty")
        self.output_folder = Path(folder)
        self.output_folder.mkdir(parents=True, exist_ok=True)
        self.image_folder = self.output_folder / "images"
        self.image_folder.mkdir(parents=True, exist_ok=True)

    def process(self) -> None:
        """Write the train set then the validation set into one label file."""
        if self.image_folder is None:
            raise ValueError("output folder has not been set")
        label_path = self.image_folder / "labels.txt"
        with open(label_path, "w", encoding="utf-8") as fh:
            self._process_images(fh, self.train_set, ExportSplit.TRAIN)
            self._process_images(fh, self.validation_set, ExportSplit.VAL)

    def _process_images(
        self, out: TextIO, images: Sequence[str], split_type: ExportSplit
    ) -> None:
        folder = Path(self.image_folder)
        for image_path in images:
            source = self.dataset.root / image_path
            try:
                width, height = image_size(source)
            except OSError:
                continue

            labels = self.dataset.labels(image_path)
            if not self.export_unlabelled and not labels:
                log.debug("%s is unlabelled", image_path)
                continue

            stem = Path(image_path).stem
            extension = Path(image_path).suffix[1:]
            target = folder / f"{stem}.{extension}"
            dupe = 1
            while target.exists():
                target = folder / f"{stem}_{dupe}.{extension}"
                dupe += 1

            try:
                shutil.copyfile(source, target)
            except OSError:
                log.error("Failed to copy image %s", target)

            bucket_path = f"{self.bucket_uri}/{target.stem}.{extension}"
            for label in labels:
                left, top = label.rect.top_left
                right, bottom = label.rect.bottom_right
                out.write(
                    f"{int(split_type)},{bucket_path},{label.classname},"
                    f"{left / width:g},{top / height:g},,,"
                    f"{right / width:g},{bottom / height:g},,\n"
                )