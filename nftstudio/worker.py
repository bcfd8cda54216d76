# nftstudio/worker.py
from PySide6.QtCore import QThread, Signal

from .errors import StudioError
from .generator import generate_collection
from .logging import get_logger
from .packager import export_collection

log = get_logger(__name__)


# =========================================================
# Worker thread for NFT generation
# =========================================================
class GenerationWorker(QThread):
    log_signal = Signal(str)
    progress_signal = Signal(object, int)
    done_signal = Signal(object)
    failed_signal = Signal(str)

    def __init__(self, layers, quantity, existing_dnas=None, canvas_size=(500, 500), rng=None):
        super().__init__()
        self.layers = layers
        self.quantity = quantity
        self.existing_dnas = existing_dnas
        self.canvas_size = canvas_size
        self.rng = rng
        self.images = []

    def cancel(self):
        self.requestInterruption()

    def _on_progress(self, images, percent):
        self.images = images
        self.progress_signal.emit(images, percent)

    def run(self):
        try:
            result = generate_collection(
                self.layers,
                self.quantity,
                existing_dnas=self.existing_dnas,
                rng=self.rng,
                canvas_size=self.canvas_size,
                progress_callback=self._on_progress,
                log_callback=lambda msg: self.log_signal.emit(msg),
                should_stop=self.isInterruptionRequested,
            )
        except (StudioError, ValueError) as e:
            log.error("Generation failed: %s", e)
            self.images = getattr(e, "images", self.images)
            self.failed_signal.emit(f"Error generating images: {e}")
            return
        self.images = result.images
        self.done_signal.emit(result)


# =========================================================
# Worker thread for exporting a collection
# =========================================================
class ExportWorker(QThread):
    done_signal = Signal(dict)
    failed_signal = Signal(str)

    def __init__(self, collection, output_dir):
        super().__init__()
        self.collection = collection
        self.output_dir = output_dir

    def run(self):
        try:
            paths = export_collection(self.collection, self.output_dir)
        except StudioError as e:
            log.error("Export failed: %s", e)
            self.failed_signal.emit(f"Error downloading collection: {e}")
            return
        self.done_signal.emit(paths)
