"""Object detector settings and the pre- and post-processing around a network."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Iterable, Sequence

import numpy as np

from .boundingbox import BoundingBox, Rect, rect_from_points
from .dataset import LabelledDataset, StrPath

log = logging.getLogger(__name__)

BoxXYWH = tuple[int, int, int, int]


class ModelFramework(IntEnum):
    TENSORFLOW = 0
    DARKNET = 1


class Target(IntEnum):
    """Inference targets, numbered as the DNN backends number them."""

    CPU = 0
    OPENCL = 1
    OPENCL_FP16 = 2
    CUDA = 6
    CUDA_FP16 = 7


_TARGET_NAMES = {
    "CPU": Target.CPU,
    "OpenCL": Target.OPENCL,
    "OpenCL FP16": Target.OPENCL_FP16,
    "CUDA": Target.CUDA,
    "CUDA FP16": Target.CUDA_FP16,
}


@dataclass
class DetectorSettings:
    """How images are prepared for a detector and how its output is filtered."""

    convert_grayscale: bool = True
    convert_depth: bool = True
    conf_threshold: float = 0.5
    nms_threshold: float = 0.4
    input_width: int = 416
    input_height: int = 416
    channels: int = 3
    target: Target = Target.OPENCL
    framework: ModelFramework = ModelFramework.DARKNET
    mean: tuple[float, float, float] = field(default=(0.0, 0.0, 0.0))
    scale_factor: float = 1 / 255.0

    def set_confidence_threshold(self, threshold: float) -> None:
        """Set the confidence threshold; negative values become zero."""
        self.conf_threshold = max(0.0, float(threshold))

    def set_nms_threshold(self, threshold: float) -> None:
        """Set the non-maximum suppression threshold; negative values become zero."""
        self.nms_threshold = max(0.0, float(threshold))

    def set_image_size(self, width: int, height: int) -> None:
        """Set the network input size; ignored unless both sides are positive."""
        if width > 0 and height > 0:
            self.input_width = width
            self.input_height = height


def framework_from_string(text: str) -> ModelFramework:
    """Map a framework name such as ``"Darknet (YOLO)"`` to a framework; Darknet by default."""
    lowered = text.lower()
    if lowered.startswith("tensorflow"):
        log.info("Detector framework: Tensorflow")
        return ModelFramework.TENSORFLOW
    if lowered.startswith("darknet"):
        log.info("Detector framework: Darknet")
    return ModelFramework.DARKNET


def target_from_string(text: str) -> Target:
    """Map a target name such as ``"CUDA FP16"`` to a target; CPU for unknown names."""
    return _TARGET_NAMES.get(text, Target.CPU)


def read_names_file(path: StrPath) -> list[str]:
    """Return the class names of a names file, whitespace-simplified and lower-cased."""
    with open(path, encoding="utf-8") as fh:
        lines = fh.read().splitlines()
    names = [" ".join(line.split()).lower() for line in lines]
    for index, name in enumerate(names):
        log.info("Added detection class: %d %s", index, name)
    return names


def _overlap(a: BoxXYWH, b: BoxXYWH) -> float:
    """Intersection over union of two (x, y, width, height) boxes."""
    area_a = a[2] * a[3]
    area_b = b[2] * b[3]
    if area_a + area_b <= 0:
        return 1.0
    ix = max(0, min(a[0] + a[2], b[0] + b[2]) - max(a[0], b[0]))
    iy = max(0, min(a[1] + a[3], b[1] + b[3]) - max(a[1], b[1]))
    inter = ix * iy
    return inter / (area_a + area_b - inter)


def nms_boxes(
    boxes: Sequence[BoxXYWH],
    scores: Sequence[float],
    score_threshold: float,
    nms_threshold: float,
) -> list[int]:
    """Greedy non-maximum suppression; return kept indices, highest score first."""
    if len(boxes) != len(scores):
        raise ValueError("boxes and scores must have the same length")
    candidates = [i for i, score in enumerate(scores) if score > score_threshold]
    candidates.sort(key=lambda i: scores[i], reverse=True)
    kept: list[int] = []
    for index in candidates:
        if all(_overlap(boxes[index], boxes[other]) <= nms_threshold for other in kept):
            kept.append(index)
    return kept


def _class_name(class_names: Sequence[str], classid: int) -> str:
    if not 0 <= classid < len(class_names):
        raise IndexError(f"class id {classid} is not in the names list")
    return class_names[classid]


def postprocess_darknet(
    outputs: Iterable[np.ndarray],
    frame_width: int,
    frame_height: int,
    class_names: Sequence[str],
    conf_threshold: float,
    nms_threshold: float,
) -> list[BoundingBox]:
    """Turn YOLO output rows (cx, cy, w, h, objectness, class scores...) into boxes."""
    class_ids: list[int] = []
    confidences: list[float] = []
    boxes: list[BoxXYWH] = []
    fw = np.float32(frame_width)
    fh = np.float32(frame_height)

    for output in outputs:
        data = np.asarray(output, dtype=np.float32)
        if data.ndim != 2:
            data = data.reshape(-1, data.shape[-1])
        for row in data:
            scores = row[5:]
            if scores.size == 0:
                continue
            class_id = int(np.argmax(scores))
            confidence = float(scores[class_id])
            if confidence > 0:
                center_x = int(row[0] * fw)
                center_y = int(row[1] * fh)
                width = int(row[2] * fw)
                height = int(row[3] * fh)
                left = center_x - int(width / 2)
                top = center_y - int(height / 2)
                class_ids.append(class_id)
                confidences.append(confidence)
                boxes.append((left, top, width, height))
            elif confidence < 0:
                log.debug(
                    "Detected %s with low confidence: %f",
                    _class_name(class_names, class_id),
                    confidence,
                )

    results: list[BoundingBox] = []
    for index in nms_boxes(boxes, confidences, conf_threshold, nms_threshold):
        x, y, w, h = boxes[index]
        top_left = (max(0, x), max(0, y))
        bottom_right = (
            min(top_left[0] + w, frame_width),
            min(top_left[1] + h, frame_height),
        )
        classid = class_ids[index]
        box = BoundingBox(
            rect=rect_from_points(top_left, bottom_right),
            classname=_class_name(class_names, classid),
            classid=classid,
            confidence=confidences[index],
        )
        log.info("Found %s at %s, conf: %f", box.classname, box.rect.center, box.confidence)
        results.append(box)
    return results


def postprocess_tensorflow(
    detections: np.ndarray,
    frame_width: int,
    frame_height: int,
    class_names: Sequence[str],
    conf_threshold: float,
) -> list[BoundingBox]:
    """Turn rows of (batch, class, confidence, left, top, right, bottom) into boxes."""
    rows = np.asarray(detections, dtype=np.float32).reshape(-1, 7)
    fw = np.float32(frame_width)
    fh = np.float32(frame_height)

    def clamp(value: int, limit: int) -> int:
        return max(0, min(value, limit - 1))

    results: list[BoundingBox] = []
    for row in rows:
        confidence = float(row[2])
        if not confidence > conf_threshold:
            continue
        classid = int(row[1])
        rect = Rect(
            left=clamp(int(fw * row[3]), frame_width),
            top=clamp(int(fh * row[4]), frame_height),
            right=clamp(int(fw * row[5]), frame_width),
            bottom=clamp(int(fh * row[6]), frame_height),
        )
        box = BoundingBox(
            rect=rect,
            classname=_class_name(class_names, classid),
            classid=classid,
            confidence=confidence,
        )
        log.info("Found (%d) %s at %s, conf: %f", classid, box.classname, rect.center, confidence)
        results.append(box)
    return results


def _channels(image: np.ndarray) -> int:
    return 1 if image.ndim == 2 else image.shape[2]


def scale_depth(image: np.ndarray) -> np.ndarray:
    """Stretch an image's value range onto 0..255 and return it as 8-bit."""
    data = np.asarray(image, dtype=np.float32)
    if data.size == 0:
        return data.astype(np.uint8)
    minval = float(data.min())
    value_range = float(data.max()) - minval
    if value_range == 0:
        return np.zeros(data.shape, dtype=np.uint8)
    scaled = (data - np.float32(minval)) * np.float32(255.0 / value_range)
    return np.clip(np.rint(scaled), 0, 255).astype(np.uint8)


def prepare_image(image: np.ndarray, settings: DetectorSettings) -> np.ndarray:
    """Drop alpha, reduce 16-bit depth and expand grayscale as the settings ask.

    Raises ValueError when the result does not have the channels the model expects.
    """
    result = np.asarray(image)
    if result.ndim == 3 and result.shape[2] == 4:
        result = result[:, :, :3]

    if settings.convert_depth and result.dtype.itemsize == 2 and _channels(result) == 1:
        result = scale_depth(result)

    if settings.convert_grayscale and _channels(result) == 1:
        gray = result if result.ndim == 2 else result[:, :, 0]
        result = np.stack([gray, gray, gray], axis=2)

    if _channels(result) != settings.channels:
        raise ValueError(
            f"Input channel mismatch. Expecting {settings.channels} channels "
            f"but image has {_channels(result)} channels."
        )
    return result


def merge_detections(
    dataset: LabelledDataset, image_path: StrPath, boxes: Iterable[BoundingBox]
) -> int:
    """Add detected boxes to an image, skipping ones already there; return how many were added."""
    existing = dataset.labels(image_path)
    added = 0
    for box in boxes:
        if box.classname and dataset.class_id(box.classname) is None:
            dataset.add_class(box.classname)
        duplicate = any(
            other.rect == box.rect and other.classname == box.classname for other in existing
        )
        if not duplicate:
            dataset.add_label(image_path, box)
            added += 1
    return added