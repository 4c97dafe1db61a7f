import pytest
from PIL import Image

from deeplabel.boundingbox import BoundingBox, Rect
from deeplabel.dataset import LabelledDataset
from deeplabel.exporting import BaseExporter, image_size


class RecordingExporter(BaseExporter):
    def process(self):
        self.processed = (list(self.train_set), list(self.validation_set))


def _dataset(count=10, labelled_every=1):
    ds = LabelledDataset()
    for i in range(count):
        name = f"img{i}.png"
        ds.add_asset(name)
        if i % labelled_every == 0:
            ds.add_label(name, BoundingBox(rect=Rect.from_xywh(0, 0, 5, 5), classname="cat"))
    return ds


def test_base_exporter_is_abstract():
    with pytest.raises(TypeError):
        BaseExporter(LabelledDataset())


def test_select_images_labelled_only_or_all():
    ds = _dataset(count=4, labelled_every=2)
    exporter = RecordingExporter(ds)
    assert exporter.select_images(False) == ds.labelled_images()
    assert exporter.select_images(True) == ds.images()


def test_split_zero_puts_everything_in_train():
    exporter = RecordingExporter(_dataset())
    exporter.select_images(False)
    exporter.split_data(0)
    assert exporter.validation_set == []
    assert exporter.train_set == exporter.images


def test_default_split_puts_everything_in_validation():
    exporter = RecordingExporter(_dataset())
    exporter.select_images(False)
    exporter.split_data()
    assert exporter.train_set == []
    assert exporter.validation_set == exporter.images


def test_split_without_shuffle_keeps_order():
    exporter = RecordingExporter(_dataset())
    images = exporter.select_images(False)
    exporter.split_data(0.3)
    assert len(exporter.validation_set) == 3
    assert exporter.validation_set + exporter.train_set == images


def test_shuffle_is_seeded_and_keeps_all_images():
    first = RecordingExporter(_dataset())
    images = first.select_images(False)
    first.split_data(0.5, shuffle=True, seed=7)
    second = RecordingExporter(_dataset())
    second.select_images(False)
    second.split_data(0.5, shuffle=True, seed=7)
    assert first.validation_set == second.validation_set
    assert sorted(first.validation_set + first.train_set) == sorted(images)


@pytest.mark.parametrize("split", [-0.1, 1.5])
def test_invalid_split_raises(split):
    exporter = RecordingExporter(_dataset())
    exporter.select_images(False)
    with pytest.raises(ValueError):
        exporter.split_data(split)


def test_output_folder_with_subfolders(tmp_path):
    exporter = RecordingExporter(_dataset())
    exporter.validation_split = True
    out = tmp_path / "out"
    exporter.set_output_folder(out)
    assert exporter.train_folder == out / "train"
    assert exporter.val_folder == out / "val"
    assert exporter.train_folder.is_dir()
    assert exporter.val_folder.is_dir()


def test_output_folder_without_validation_leaves_val_unset(tmp_path):
    exporter = RecordingExporter(_dataset())
    exporter.set_output_folder(tmp_path / "out")
    assert exporter.val_folder is None
    assert not (tmp_path / "out" / "val").exists()


def test_output_folder_without_subfolders(tmp_path):
    exporter = RecordingExporter(_dataset())
    exporter.set_output_folder(tmp_path, no_subfolders=True)
    assert exporter.train_folder == tmp_path
    assert exporter.val_image_folder == tmp_path
    assert not (tmp_path / "train").exists()


def test_empty_output_folder_raises():
    with pytest.raises(ValueError):
        RecordingExporter(_dataset()).set_output_folder("")


def test_empty_prefix_is_ignored():
    exporter = RecordingExporter(_dataset())
    exporter.set_filename_prefix("run_")
    exporter.set_filename_prefix("")
    assert exporter.filename_prefix == "run_"


def test_image_size_reads_png(tmp_path):
    path = tmp_path / "x.png"
    Image.new("RGB", (31, 17)).save(path)
    assert image_size(path) == (31, 17)


def test_image_size_rejects_non_image(tmp_path):
    path = tmp_path / "x.png"
    path.write_text("not an image", encoding="utf-8")
    with pytest.raises(OSError):
        image_size(path)