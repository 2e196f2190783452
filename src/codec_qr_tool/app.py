"""PyQt5 user interface for the Codec QR Tool."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Tuple

from PyQt5.QtCore import QObject, QThread, Qt, pyqtSignal
from PyQt5.QtGui import QFont
from PyQt5.QtWidgets import (
    QApplication,
    QComboBox,
    QFileDialog,
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QMainWindow,
    QMessageBox,
    QPushButton,
    QTextEdit,
    QVBoxLayout,
    QWidget,
)

from .config import AppConfig, StyleConfig
from .dispatcher import (
    Direction,
    Method,
    OperationRequest,
    OperationResult,
    ResultKind,
    TransformDispatcher,
)
from .errors import UserInputError
from .logging_setup import configure_logging
from .state import AppState

logger = logging.getLogger(__name__)

METHOD_LABELS = {
    Method.BASE64: "Base64",
    Method.HEX: "Hex",
    Method.URL: "URL escape",
    Method.XOR: "XOR (key)",
    Method.AES: "AES (password)",
    Method.MD5: "MD5 (one-way)",
    Method.SHA256: "SHA-256 (one-way)",
    Method.QRGEN: "QR code generate",
    Method.QRDECODE: "QR code decode",
}


class QRDecodeWorker(QObject):  # pragma: no cover - requires Qt event loop
    """Decode one image file off the UI thread."""

    finished = pyqtSignal(object)

    def __init__(self, dispatcher: TransformDispatcher, image_path: str):
        super().__init__()
        self._dispatcher = dispatcher
        self._request = OperationRequest(
            method=Method.QRDECODE,
            direction=Direction.DECODE,
            image_path=image_path,
        )

    def run(self) -> None:
        try:
            result = self._dispatcher.run(self._request)
        except Exception as exc:
            logger.exception("QR decode worker failed")
            result = OperationResult(f"Error decoding QR: {exc}", ResultKind.ERROR)
        self.finished.emit(result)


class CodecWindow(QMainWindow):  # pragma: no cover - requires Qt event loop
    def __init__(self, config: AppConfig | None = None) -> None:
        super().__init__()

        self._config = config or AppConfig()
        self._style = StyleConfig()
        self._state = AppState()
        self._dispatcher = TransformDispatcher(self._config)
        self._decode_jobs: List[Tuple[QThread, QRDecodeWorker]] = []
        self._last_qr_text: str | None = None

        self._setup_ui()

    def _setup_ui(self) -> None:
        self.setWindowTitle(f"{self._config.app_name} v{self._config.app_version}")
        self.setGeometry(100, 100, 760, 820)
        self.setMinimumSize(560, 640)

        panel = QWidget()
        panel.setObjectName("CentralPanel")
        layout = QVBoxLayout(panel)
        layout.setSpacing(12)

        header_row = QHBoxLayout()
        title = QLabel("Encode / Decode / QR")
        title.setObjectName("HeaderLabel")
        self._theme_btn = QPushButton(self._style.toggle_label(self._state.dark_theme))
        self._theme_btn.setObjectName("ThemeButton")
        self._theme_btn.setFixedWidth(56)
        self._theme_btn.clicked.connect(self._toggle_theme)
        header_row.addWidget(title)
        header_row.addStretch()
        header_row.addWidget(self._theme_btn)

        input_group = QGroupBox("Input")
        input_layout = QVBoxLayout()

        self._method_selector = QComboBox()
        for method in Method:
            self._method_selector.addItem(METHOD_LABELS[method], method.value)
        self._method_selector.currentIndexChanged.connect(self._on_method_changed)

        self._input_text = QTextEdit()
        self._input_text.setPlaceholderText("Enter text...")
        self._input_text.setMinimumHeight(110)

        self._key_input = QLineEdit()
        self._key_input.setPlaceholderText("Key / password (XOR and AES only)")

        upload_btn = QPushButton("Upload QR Image")
        upload_btn.clicked.connect(self._choose_qr_file)
        self._file_label = QLabel("No image selected")
        self._file_label.setObjectName("SubtleLabel")

        file_row = QHBoxLayout()
        file_row.addWidget(upload_btn)
        file_row.addWidget(self._file_label, 1)

        input_layout.addWidget(QLabel("Method:"))
        input_layout.addWidget(self._method_selector)
        input_layout.addWidget(self._input_text)
        input_layout.addWidget(self._key_input)
        input_layout.addLayout(file_row)
        input_group.setLayout(input_layout)

        action_row = QHBoxLayout()
        encode_btn = QPushButton("Encode")
        encode_btn.setObjectName("AccentButton")
        encode_btn.clicked.connect(lambda: self._run(Direction.ENCODE))
        decode_btn = QPushButton("Decode")
        decode_btn.setObjectName("AccentButton")
        decode_btn.clicked.connect(lambda: self._run(Direction.DECODE))
        copy_btn = QPushButton("Copy")
        copy_btn.clicked.connect(self._copy_result)
        download_btn = QPushButton("Download")
        download_btn.clicked.connect(self._download_result)
        for button in (encode_btn, decode_btn, copy_btn, download_btn):
            action_row.addWidget(button)

        output_group = QGroupBox("Result")
        output_layout = QVBoxLayout()

        self._result_display = QTextEdit()
        self._result_display.setReadOnly(True)
        self._result_display.setMinimumHeight(110)
        self._result_display.setFont(QFont(self._style.font_mono.split(",")[0], 11))

        self._qr_container = QWidget()
        qr_layout = QVBoxLayout(self._qr_container)
        self._qr_display = QLabel()
        self._qr_display.setObjectName("qrDisplayLabel")
        self._qr_display.setAlignment(Qt.AlignCenter)
        size = self._config.qr_preview_size
        self._qr_display.setMinimumSize(size, size)
        save_qr_btn = QPushButton("Save QR Image")
        save_qr_btn.clicked.connect(self._save_qr_image)
        qr_layout.addWidget(self._qr_display)
        qr_layout.addWidget(save_qr_btn)
        self._qr_container.setVisible(False)

        output_layout.addWidget(self._result_display)
        output_layout.addWidget(self._qr_container)
        output_group.setLayout(output_layout)

        layout.addLayout(header_row)
        layout.addWidget(input_group)
        layout.addLayout(action_row)
        layout.addWidget(output_group)
        layout.addStretch()

        self.setCentralWidget(panel)
        self._apply_stylesheet()
        self.show()

    def _apply_stylesheet(self) -> None:
        style = self._style
        palette = style.palette(self._state.dark_theme)
        self.setStyleSheet(
            f"""
            QMainWindow {{ background: {palette.bg_primary}; }}
            QWidget {{ color: {palette.fg_primary}; font-family: {style.font_family}; font-size: {style.font_size}px; }}
            QGroupBox {{ font-weight: bold; border: 1px solid {palette.border}; border-radius: 8px; margin-top: 1ex; padding: 15px; background: {palette.bg_secondary}; }}
            QLineEdit, QTextEdit, QComboBox {{ background: {palette.bg_primary}; color: {palette.fg_secondary}; border: 1px solid {palette.border}; border-radius: 4px; padding: 8px; }}
            QLineEdit:focus, QTextEdit:focus {{ border: 1px solid {palette.accent}; }}
            QPushButton {{ background: {palette.bg_secondary}; color: {palette.fg_secondary}; border: 1px solid {palette.border}; padding: 10px 16px; border-radius: 4px; font-weight: bold; }}
            QPushButton#AccentButton {{ background: {palette.accent}; color: {palette.bg_primary}; border: none; }}
            #HeaderLabel {{ font-size: 22px; font-weight: bold; color: {palette.fg_secondary}; }}
            #SubtleLabel {{ color: {palette.accent}; }}
            #CentralPanel {{ background: {palette.bg_primary}; padding: 20px; }}
            #qrDisplayLabel {{ border: 2px dashed {palette.border}; background: #FFFFFF; border-radius: 4px; }}
            """
        )

    def _current_method(self) -> Method:
        return Method(self._method_selector.currentData())

    def _on_method_changed(self, _index: int) -> None:
        self._state.method = self._current_method().value

    def _build_request(self, direction: Direction) -> OperationRequest:
        return OperationRequest(
            method=self._current_method(),
            direction=direction,
            input_text=self._input_text.toPlainText(),
            key=self._key_input.text(),
            image_path=self._state.image_path,
        )

    def _run(self, direction: Direction) -> None:
        request = self._build_request(direction)

        if request.method is Method.QRDECODE and direction is Direction.DECODE:
            if not request.image_path:
                QMessageBox.warning(
                    self, "Input Required", 'Choose a QR image file using "Upload QR Image" button.'
                )
                return
            self._start_qr_decode(request.image_path)
            return

        try:
            result = self._dispatcher.run(request)
        except UserInputError as exc:
            QMessageBox.warning(self, "Input Required", str(exc))
            return
        self._show_result(result)

    def _show_result(self, result: OperationResult) -> None:
        self._state.apply_result(result)
        self._result_display.setPlainText(result.text)

        self._qr_display.clear()
        self._last_qr_text = result.qr_text
        if result.qr_text is None:
            self._qr_container.setVisible(False)
            return

        try:
            self._qr_display.setPixmap(self._dispatcher.qr.to_qpixmap(result.qr_text))
        except RuntimeError as exc:
            self._qr_display.setText(f"QR preview failed: {exc}")
        self._qr_container.setVisible(True)

    def _choose_qr_file(self) -> None:
        path, _ = QFileDialog.getOpenFileName(
            self, "Open QR Image", "", "Images (*.png *.jpg *.jpeg *.bmp *.gif *.webp)"
        )
        if not path:
            return

        self._state.image_path = path
        self._file_label.setText(Path(path).name)
        self._start_qr_decode(path)

    def _start_qr_decode(self, path: str) -> None:
        worker = QRDecodeWorker(self._dispatcher, path)
        thread = QThread()
        worker.moveToThread(thread)

        job = (thread, worker)
        thread.started.connect(worker.run)
        worker.finished.connect(self._on_qr_decoded)
        worker.finished.connect(thread.quit)
        thread.finished.connect(lambda: self._forget_job(job))
        thread.finished.connect(thread.deleteLater)

        self._decode_jobs.append(job)
        self._show_result(OperationResult("Decoding QR image…"))
        thread.start()

    def _forget_job(self, job: Tuple[QThread, QRDecodeWorker]) -> None:
        if job in self._decode_jobs:
            self._decode_jobs.remove(job)

    def _on_qr_decoded(self, result: OperationResult) -> None:
        self._show_result(result)
        if not result.is_error:
            index = self._method_selector.findData(Method.QRDECODE.value)
            if index >= 0:
                self._method_selector.setCurrentIndex(index)

    def _copy_result(self) -> None:
        text = self._state.result_text
        if not text:
            QMessageBox.information(self, "Copy", "Nothing to copy.")
            return

        clipboard = QApplication.clipboard()
        if clipboard is not None:
            clipboard.setText(text)
            if clipboard.text() == text:
                QMessageBox.information(self, "Copy", "Copied to clipboard!")
                return

        logger.warning("System clipboard unavailable, falling back to manual selection")
        self._result_display.setFocus()
        self._result_display.selectAll()
        QMessageBox.warning(
            self, "Copy", "Clipboard unavailable. The result is selected; press Ctrl+C to copy."
        )

    def _download_result(self) -> None:
        text = self._state.result_text
        if not text:
            QMessageBox.information(self, "Download", "Nothing to download.")
            return

        path, _ = QFileDialog.getSaveFileName(
            self, "Save Result", self._config.download_filename, "Text Files (*.txt)"
        )
        if not path:
            return

        try:
            Path(path).write_bytes(text.encode("utf-8"))
        except OSError as exc:
            QMessageBox.critical(self, "Error", f"Save failed: {exc}")

    def _save_qr_image(self) -> None:
        path, _ = QFileDialog.getSaveFileName(self, "Save QR Code", "qrcode.png", "PNG Images (*.png)")
        if not path:
            return

        if self._last_qr_text is None:
            return
        try:
            self._dispatcher.qr.save_png(self._last_qr_text, path)
        except (OSError, RuntimeError, ValueError) as exc:
            QMessageBox.critical(self, "Error", f"Save failed: {exc}")

    def _toggle_theme(self) -> None:
        dark = self._state.toggle_theme()
        self._theme_btn.setText(self._style.toggle_label(dark))
        self._apply_stylesheet()

    def closeEvent(self, event) -> None:  # type: ignore[override]
        for thread, _worker in list(self._decode_jobs):
            if thread.isRunning():
                # A running scan cannot be interrupted; block until it returns.
                thread.quit()
                thread.wait()
        self._decode_jobs.clear()
        event.accept()


def run() -> int:  # pragma: no cover - requires Qt event loop
    config = AppConfig()
    configure_logging(config.log_level)
    app = QApplication.instance() or QApplication([])
    app.setApplicationName("Codec QR Tool")
    window = CodecWindow(config)
    return app.exec_()


__all__ = ["run", "CodecWindow"]
