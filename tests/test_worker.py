"""Tests for the Qt worker threads (run() is called inline)."""

import random
import zipfile

import pytest
from PySide6.QtCore import QCoreApplication

from nftstudio.generator import GenerationResult
from nftstudio.models import Collection
from nftstudio.worker import ExportWorker, GenerationWorker


@pytest.fixture(scope="module")
def qapp():
    return QCoreApplication.instance() or QCoreApplication([])


class TestGenerationWorker:
    def test_emits_progress_and_done(self, qapp, scenario_layers):
        worker = GenerationWorker(scenario_layers, 2, canvas_size=(8, 8), rng=random.Random(1))
        progress, done, failed, logs = [], [], [], []
        worker.progress_signal.connect(lambda images, pct: progress.append(pct))
        worker.done_signal.connect(done.append)
        worker.failed_signal.connect(failed.append)
        worker.log_signal.connect(logs.append)

        worker.run()

        assert progress == [50, 100]
        assert len(done) == 1 and isinstance(done[0], GenerationResult)
        assert failed == []
        assert len(worker.images) == 2
        assert logs

    def test_infeasible_request_reports_failure(self, qapp, scenario_layers):
        worker = GenerationWorker(scenario_layers, 3, canvas_size=(8, 8))
        failed, done = [], []
        worker.failed_signal.connect(failed.append)
        worker.done_signal.connect(done.append)

        worker.run()

        assert done == []
        assert len(failed) == 1
        assert failed[0].startswith("Error generating images:")


class TestExportWorker:
    def test_export(self, qapp, scenario_layers, tmp_path):
        gen = GenerationWorker(scenario_layers, 2, canvas_size=(8, 8))
        gen.run()
        worker = ExportWorker(Collection(name="Two Pack", images=gen.images), str(tmp_path))
        done = []
        worker.done_signal.connect(done.append)

        worker.run()

        assert len(done) == 1
        with zipfile.ZipFile(done[0]["archive"]) as zf:
            assert len(zf.namelist()) == 4

    def test_export_failure(self, qapp, tmp_path):
        worker = ExportWorker(Collection(name="Empty"), str(tmp_path))
        failed = []
        worker.failed_signal.connect(failed.append)

        worker.run()

        assert failed and "no generated images" in failed[0]
