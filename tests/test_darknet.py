import os

from PIL import Image

from deeplabel.boundingbox import BoundingBox, Rect, rect_from_points
from deeplabel.darknet import DarknetExporter, DarknetImporter
from deeplabel.dataset import LabelledDataset


def _png(path, size=(100, 80)):
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.new("RGB", size).save(path)
    return path


def _names(path, text="cat\ndog\n"):
    path.write_text(text, encoding="utf-8")
    return path


def test_generate_label_ids_cleans_names(tmp_path):
    exporter = DarknetExporter(LabelledDataset())
    exporter.generate_label_ids(_names(tmp_path / "n.names", "Cat\n  Big   Dog \n"))
    assert exporter.id_map == {"cat": 0, "big dog": 1}


def test_generate_label_ids_empty_file(tmp_path):
    exporter = DarknetExporter(LabelledDataset())
    exporter.id_map = {"old": 3}
    exporter.generate_label_ids(_names(tmp_path / "n.names", ""))
    assert exporter.id_map == {}


def test_write_labels_clamps_oversized_boxes(tmp_path):
    exporter = DarknetExporter(LabelledDataset())
    exporter.generate_label_ids(_names(tmp_path / "n.names"))
    out = tmp_path / "l.txt"
    box = BoundingBox(rect=Rect(0, 0, 199, 99), classname="Cat")
    exporter.write_labels((100, 50), out, [box])
    fields = out.read_text(encoding="utf-8").split()
    assert fields[0] == "0"
    assert fields[3] == "0.999"
    assert fields[4] == "0.999"
    assert all(0.0 <= float(v) <= 0.999 for v in fields[1:])


def test_write_labels_skips_unknown_class_but_writes_file(tmp_path):
    exporter = DarknetExporter(LabelledDataset())
    exporter.generate_label_ids(_names(tmp_path / "n.names"))
    out = tmp_path / "l.txt"
    exporter.write_labels((10, 10), out, [BoundingBox(rect=Rect(0, 0, 4, 4), classname="bird")])
    assert out.read_text(encoding="utf-8") == ""


def _export_dataset(tmp_path):
    root = tmp_path / "data"
    _png(root / "a" / "img.png")
    _png(root / "b" / "img.png")
    _png(root / "c" / "empty.png")
    ds = LabelledDataset(root=root)
    ds.add_class("cat")
    for path in ("a/img.png", "b/img.png"):
        ds.add_asset(path)
        ds.add_label(path, BoundingBox(rect=Rect.from_xywh(10, 10, 20, 20), classname="cat"))
    ds.add_asset("c/empty.png")
    return ds


def test_process_copies_images_and_deduplicates(tmp_path):
    ds = _export_dataset(tmp_path)
    exporter = DarknetExporter(ds)
    exporter.generate_label_ids(_names(tmp_path / "n.names"))
    exporter.select_images(False)
    exporter.split_data(0)
    out = tmp_path / "out"
    exporter.set_output_folder(out)
    exporter.set_filename_prefix("p_")
    exporter.process()
    assert sorted(os.listdir(out / "train")) == ["p_img.png", "p_img.txt", "p_img1.png", "p_img1.txt"]
    first = (out / "train" / "p_img.txt").read_text(encoding="utf-8").splitlines()
    assert len(first) == 1
    assert first[0].split()[0] == "0"


def test_process_with_validation_folder(tmp_path):
    ds = _export_dataset(tmp_path)
    exporter = DarknetExporter(ds)
    exporter.generate_label_ids(_names(tmp_path / "n.names"))
    exporter.validation_split = True
    exporter.select_images(False)
    exporter.split_data(0.5)
    out = tmp_path / "out"
    exporter.set_output_folder(out)
    exporter.process()
    train_pngs = [n for n in os.listdir(out / "train") if n.endswith(".png")]
    val_pngs = [n for n in os.listdir(out / "val") if n.endswith(".png")]
    assert len(train_pngs) == len(exporter.train_set)
    assert len(val_pngs) == len(exporter.validation_set)


def test_process_without_val_folder_raises(tmp_path):
    ds = _export_dataset(tmp_path)
    exporter = DarknetExporter(ds)
    exporter.generate_label_ids(_names(tmp_path / "n.names"))
    exporter.select_images(False)
    exporter.split_data(0.5)
    exporter.set_output_folder(tmp_path / "out")
    try:
        exporter.process()
    except ValueError as exc:
        assert "val" in str(exc)
    else:
        raise AssertionError("expected ValueError")


def test_export_then_import_round_trip(tmp_path):
    root = tmp_path / "data"
    _png(root / "shot.png", (100, 80))
    ds = LabelledDataset(root=root)
    ds.add_class("cat")
    ds.add_asset("shot.png")
    original = rect_from_points((20, 20), (59, 39))
    ds.add_label("shot.png", BoundingBox(rect=original, classname="cat"))

    names = _names(tmp_path / "n.names")
    exporter = DarknetExporter(ds)
    exporter.generate_label_ids(names)
    exporter.select_images(False)
    exporter.split_data(0)
    out = tmp_path / "out"
    exporter.set_output_folder(out, no_subfolders=True)
    exporter.process()

    image_list = tmp_path / "list.txt"
    image_list.write_text(str((out / "shot.png").resolve()) + "\n", encoding="utf-8")
    target = LabelledDataset()
    DarknetImporter(target).import_images(image_list, names)

    (path,) = target.images()
    (box,) = target.labels(path)
    assert box.classname == "cat"
    for got, want in zip(
        (box.rect.left, box.rect.top, box.rect.right, box.rect.bottom),
        (original.left, original.top, original.right, original.bottom),
    ):
        assert abs(got - want) <= 1


def test_import_skips_relative_paths_without_root(tmp_path):
    _png(tmp_path / "img.png")
    image_list = tmp_path / "list.txt"
    image_list.write_text("img.png\n", encoding="utf-8")
    ds = LabelledDataset()
    DarknetImporter(ds).import_images(image_list, _names(tmp_path / "n.names"))
    assert ds.images() == []
    assert ds.classes() == ["cat", "dog"]


def test_import_resolves_relative_paths_with_root(tmp_path):
    image = _png(tmp_path / "imgs" / "img.png")
    image_list = tmp_path / "list.txt"
    image_list.write_text("img.png\nmissing.png\n", encoding="utf-8")
    ds = LabelledDataset()
    DarknetImporter(ds).import_images(image_list, _names(tmp_path / "n.names"), tmp_path / "imgs")
    assert ds.images() == [str(image.resolve())]


def test_load_labels_skips_malformed_lines_and_maps_classes(tmp_path):
    image = _png(tmp_path / "img.png", (100, 100))
    (tmp_path / "img.txt").write_text(
        "1 0.5 0.5 0.2 0.2\nbad line\n0 0.5 0.5\n", encoding="utf-8"
    )
    ds = LabelledDataset()
    importer = DarknetImporter(ds)
    importer.load_classes(_names(tmp_path / "n.names"))
    boxes = importer.load_labels(image)
    assert len(boxes) == 1
    assert boxes[0].classname == "dog"
    assert boxes[0].classid == ds.class_id("dog")


def test_load_labels_unknown_class_gets_empty_name(tmp_path):
    image = _png(tmp_path / "img.png")
    (tmp_path / "img.txt").write_text("9 0.5 0.5 0.1 0.1\n", encoding="utf-8")
    boxes = DarknetImporter(LabelledDataset()).load_labels(image)
    assert [b.classname for b in boxes] == [""]


def test_load_labels_clamps_to_image(tmp_path):
    image = _png(tmp_path / "img.png", (50, 40))
    (tmp_path / "img.txt").write_text("0 0.0 0.0 1.0 1.0\n", encoding="utf-8")
    (box,) = DarknetImporter(LabelledDataset()).load_labels(image)
    assert box.rect.left >= 0 and box.rect.top >= 0
    assert box.rect.right <= 50 and box.rect.bottom <= 40


def test_load_labels_missing_image(tmp_path):
    assert DarknetImporter(LabelledDataset()).load_labels(tmp_path / "none.png") == []