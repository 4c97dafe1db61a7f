# deeplabel

A library for bounding-box labels in object detection datasets. Labels are
held in an in-memory `LabelledDataset`. You fill it from one annotation format
and write it out in another.

## What it contains

- **Label store**: `deeplabel.dataset.LabelledDataset` holds class names,
  image paths and their `BoundingBox` labels. Class ids start at 1. Each label
  that is added gets its own label id. Relative image paths are resolved
  against the dataset's `root`, which is the current directory unless you set
  it.
- **Geometry**: `deeplabel.boundingbox` has `Rect`, an integer rectangle whose
  right and bottom edges are inclusive, and `BoundingBox`, which holds a rect,
  a class name, a class id, a confidence and editing state.
- **Importers**, all built on `deeplabel.dataset.BaseImporter`:
  - `deeplabel.darknet.DarknetImporter.import_images(image_list, names_file, root_folder)`
    reads an image list, a names file, and the `.txt` label file next to each
    image.
  - `deeplabel.coco.CocoImporter.import_annotations(annotation_file, image_folder)`
    reads a COCO JSON file. It raises `ValueError` if the categories, images
    or annotations are missing.
  - `deeplabel.birdsai.BirdsAIImporter.import_sequences(sequence_folder, annotation_folder)`
    reads folders of frames, each with a `<sequence>.csv` annotation file.
- **Exporters**, all built on `deeplabel.exporting.BaseExporter`:
  - `deeplabel.darknet.DarknetExporter` copies the images and writes
    normalised `.txt` label files. Call `generate_label_ids(names_file)` first.
  - `deeplabel.coco.CocoExporter` copies the images and writes `train.json`
    and `val.json` into the output folder.
  - `deeplabel.gcp.GCPExporter` copies the images into `images/` and writes
    `images/labels.txt` in the AutoML CSV layout. `set_bucket(uri, local)`
    adds `gs://` to the URI unless it is already there or `local` is true.

  The workflow is the same for every exporter:
  1. `select_images(export_unlabelled)` picks all images or only the labelled
     ones.
  2. `split_data(split, shuffle, seed)` puts the first `split` fraction of the
     images in the validation set. With `shuffle`, the order is first
     shuffled using the seed.
  3. `set_output_folder(folder, no_subfolders)` creates the folders.
  4. `process()` writes the files.
- **Detection post-processing** (`deeplabel.detection`) covers:
  - `DetectorSettings`
  - `framework_from_string`, `target_from_string` and `read_names_file`
  - greedy non-maximum suppression (`nms_boxes`)
  - decoding of YOLO-style and TensorFlow-style output arrays
    (`postprocess_darknet`, `postprocess_tensorflow`)
  - image preparation (`scale_depth`, `prepare_image`)
  - `merge_detections`, which adds detections to a dataset and skips boxes
    that are already there.
- **Model configuration**: `deeplabel.modelconfig.read_darknet_config` reads
  width, height and channels from the `[net]` section of a Darknet `.cfg`
  file. `ModelConfig.check()` validates a set of model files.
- **Utilities**:
  - CRC32C with TFRecord-style masking (`deeplabel.crc32c`).
  - A terminal progress bar (`deeplabel.progress.CliProgressBar`).
  - Edge and corner hit-testing and box dragging for interactive editors
    (`deeplabel.hittest`).
  - 8-bit scaling, colour map names and zoom steps for image viewers
    (`deeplabel.display`).

## Installation

```
pip install .
```

For the test suite:

```
pip install ".[test]"
pytest
```

## Example: Darknet to COCO

With a non-zero split, set `validation_split` before calling
`set_output_folder`. That way a `val` folder is created for the validation
images.

```python
from deeplabel.dataset import LabelledDataset
from deeplabel.darknet import DarknetImporter
from deeplabel.coco import CocoExporter

dataset = LabelledDataset()
DarknetImporter(dataset).import_images("images.txt", "obj.names", "/data/root")

exporter = CocoExporter(dataset)
exporter.select_images(export_unlabelled=False)
exporter.split_data(0.2, shuffle=True, seed=42)
exporter.validation_split = True
exporter.set_output_folder("coco_out", no_subfolders=False)
exporter.process()
```

## Example: CRC32C

```python
from deeplabel.crc32c import value, mask, unmask

crc = value(b"123456789")
assert crc == 0xE3069283
assert unmask(mask(crc)) == crc
```

## What it does not do

- There is no command-line program and no graphical labelling tool. The
  package is a library only.
- Datasets live in memory. There is no database or project file to save them
  to or load them from.
- `deeplabel.detection` does not load or run neural networks. It prepares
  images and decodes output arrays that you obtain from a model yourself.
- Darknet, COCO, GCP AutoML and BIRDSAI are the only supported formats.
  TFRecord, Pascal VOC, KITTI, MOT and video output are not handled, although
  `deeplabel.crc32c` provides the checksum that TFRecord files use.