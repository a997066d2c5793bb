# main.py
from __future__ import annotations

import asyncio
import logging

from PyQt6.QtCore import Qt, QTimer
from PyQt6.QtGui import QAction, QColor, QKeySequence
from PyQt6.QtWidgets import (
    QApplication,
    QMainWindow,
    QWidget,
    QVBoxLayout,
    QHBoxLayout,
    QLabel,
    QGroupBox,
    QLineEdit,
    QPushButton,
    QTableWidget,
    QTableWidgetItem,
    QHeaderView,
    QMessageBox,
    QScrollArea,
)

from ledger import LocalLedger
from models import UiMode, ViewState
from remote_record import RemoteRecordClient
from session import SessionStore
from sync_controller import SyncController
from ui_dialogs import ConnectWalletDialog
from ui_styles import DARK_QSS
from wallet import LocalWallet

import storage

logger = logging.getLogger(__name__)

_PENDING_COLOR = QColor("#8a8a8a")

_PROGRESS_TEXT = {
    UiMode.CONNECTING_WALLET: "Connecting to wallet...",
    UiMode.ACCOUNT_UNKNOWN: "Loading your links...",
    UiMode.INITIALIZING: "Creating your link record...",
}


# -----------------------------
# asyncio inside the Qt event loop
# -----------------------------

def _pump(loop: asyncio.AbstractEventLoop) -> None:
    # one pass over whatever asyncio has ready, then back to Qt
    loop.call_soon(loop.stop)
    loop.run_forever()


# -----------------------------
# Main Window
# -----------------------------

class LinkBoardWindow(QMainWindow):
    def __init__(self, loop: asyncio.AbstractEventLoop, wallet=None, ledger=None):
        super().__init__()
        self.setWindowTitle(storage.APP_NAME)
        self.setMinimumSize(760, 620)

        self.loop = loop
        self._tasks: set[asyncio.Task] = set()

        self.wallet = wallet or LocalWallet(approve=self._approve_wallet)
        self.ledger = ledger or LocalLedger()
        self.session = SessionStore(self.wallet)
        self.controller = SyncController(self.session, RemoteRecordClient(self.ledger))

        self._build_actions_and_menu()
        self._build_ui()

        self._unsubscribe = self.controller.subscribe(self.render)
        self.render(self.controller.view_state())

    def start(self) -> None:
        self._spawn(self.controller.start())

    # ---------------- Tasks ----------------

    def _spawn(self, coro) -> None:
        task = self.loop.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._task_done)

    def _task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("ui task failed", exc_info=exc)
            self.statusBar().showMessage(f"Unexpected error: {exc}")

    # ---------------- Menu ----------------

    def _build_actions_and_menu(self) -> None:
        self.act_connect = QAction("Connect Wallet", self)
        self.act_connect.setShortcut(QKeySequence("Ctrl+K"))
        self.act_connect.triggered.connect(self.connect_wallet)

        self.act_disconnect = QAction("Disconnect", self)
        self.act_disconnect.triggered.connect(self.disconnect_wallet)

        self.act_refresh = QAction("Refresh", self)
        self.act_refresh.setShortcut(QKeySequence("F5"))
        self.act_refresh.triggered.connect(self.refresh)

        self.act_exit = QAction("Exit", self)
        self.act_exit.triggered.connect(self.close)

        mb = self.menuBar()
        m_wallet = mb.addMenu("Wallet")
        m_wallet.addAction(self.act_connect)
        m_wallet.addAction(self.act_disconnect)
        m_wallet.addSeparator()
        m_wallet.addAction(self.act_exit)

        m_links = mb.addMenu("Links")
        m_links.addAction(self.act_refresh)

    # ---------------- UI ----------------

    def _build_ui(self) -> None:
        central = QWidget()
        self.setCentralWidget(central)
        central_layout = QVBoxLayout(central)
        central_layout.setContentsMargins(0, 0, 0, 0)

        scroll = QScrollArea()
        scroll.setWidgetResizable(True)
        central_layout.addWidget(scroll)

        content = QWidget()
        scroll.setWidget(content)

        root = QVBoxLayout(content)
        root.setContentsMargins(16, 16, 16, 16)
        root.setSpacing(12)

        title = QLabel(storage.APP_NAME)
        title.setObjectName("header")
        title.setAlignment(Qt.AlignmentFlag.AlignCenter)
        subtitle = QLabel("Collect your favourite links on-chain.")
        subtitle.setObjectName("subText")
        subtitle.setAlignment(Qt.AlignmentFlag.AlignCenter)
        root.addWidget(title)
        root.addWidget(subtitle)

        # Identity row
        info_row = QHBoxLayout()
        self.lbl_identity = QLabel()
        self.lbl_identity.setObjectName("subText")
        self.lbl_identity.setTextInteractionFlags(Qt.TextInteractionFlag.TextSelectableByMouse)
        info_row.addWidget(self.lbl_identity)
        info_row.addStretch(1)
        self.lbl_network = QLabel(f"Network: {storage.NETWORK}")
        self.lbl_network.setObjectName("subText")
        info_row.addWidget(self.lbl_network)
        root.addLayout(info_row)

        self.lbl_error = QLabel()
        self.lbl_error.setObjectName("errorBanner")
        self.lbl_error.setWordWrap(True)
        root.addWidget(self.lbl_error)

        # -------- Mode panels --------
        self.btn_connect = QPushButton("Connect to Wallet")
        self.btn_connect.setObjectName("cta")
        self.btn_connect.clicked.connect(self.connect_wallet)
        root.addWidget(self.btn_connect, alignment=Qt.AlignmentFlag.AlignCenter)

        self.lbl_progress = QLabel()
        self.lbl_progress.setObjectName("subText")
        self.lbl_progress.setAlignment(Qt.AlignmentFlag.AlignCenter)
        root.addWidget(self.lbl_progress)

        self.btn_init = QPushButton("Do One-Time Initialization For Link Record")
        self.btn_init.setObjectName("cta")
        self.btn_init.clicked.connect(self.initialize_record)
        root.addWidget(self.btn_init, alignment=Qt.AlignmentFlag.AlignCenter)

        self.btn_retry = QPushButton("Retry")
        self.btn_retry.clicked.connect(self.refresh)
        root.addWidget(self.btn_retry, alignment=Qt.AlignmentFlag.AlignCenter)

        # -------- Ready: input + list --------
        self.ready_box = QGroupBox("Your Links")
        ready_layout = QVBoxLayout(self.ready_box)

        entry_row = QHBoxLayout()
        self.link_edit = QLineEdit()
        self.link_edit.setPlaceholderText("Enter a link! (Enter submits)")
        self.link_edit.setClearButtonEnabled(True)
        self.link_edit.textChanged.connect(self.controller.set_draft)
        self.link_edit.returnPressed.connect(self.submit)
        entry_row.addWidget(self.link_edit, 1)

        self.btn_submit = QPushButton("Submit")
        self.btn_submit.setObjectName("cta")
        self.btn_submit.setFixedWidth(110)
        self.btn_submit.clicked.connect(self.submit)
        entry_row.addWidget(self.btn_submit)
        ready_layout.addLayout(entry_row)

        self.table = QTableWidget(0, 3)
        self.table.setHorizontalHeaderLabels(["Link", "Submitted by", "Status"])
        self.table.horizontalHeader().setSectionResizeMode(0, QHeaderView.ResizeMode.Stretch)
        self.table.horizontalHeader().setSectionResizeMode(1, QHeaderView.ResizeMode.ResizeToContents)
        self.table.horizontalHeader().setSectionResizeMode(2, QHeaderView.ResizeMode.ResizeToContents)
        self.table.setSelectionBehavior(QTableWidget.SelectionBehavior.SelectRows)
        self.table.setSelectionMode(QTableWidget.SelectionMode.SingleSelection)
        self.table.setEditTriggers(QTableWidget.EditTrigger.NoEditTriggers)
        self.table.setMinimumHeight(260)
        ready_layout.addWidget(self.table, 1)

        root.addWidget(self.ready_box, 1)
        root.addStretch(0)

        footer = QLabel(f'<a href="{storage.TWITTER_LINK}" style="color: #bdbdbd;">built on @{storage.TWITTER_HANDLE}</a>')
        footer.setObjectName("footer")
        footer.setOpenExternalLinks(True)
        footer.setAlignment(Qt.AlignmentFlag.AlignCenter)
        root.addWidget(footer)

    # ---------------- Render ----------------

    def render(self, view: ViewState) -> None:
        mode = view.ui_mode

        if view.identity:
            self.lbl_identity.setText(f"Wallet: {view.identity}")
        else:
            self.lbl_identity.setText("Wallet: not connected")

        self.lbl_error.setText(view.error_message)
        self.lbl_error.setVisible(bool(view.error_message))

        self.btn_connect.setVisible(mode is UiMode.DISCONNECTED)
        self.lbl_progress.setText(_PROGRESS_TEXT.get(mode, ""))
        self.lbl_progress.setVisible(mode in _PROGRESS_TEXT)
        self.btn_init.setVisible(mode is UiMode.UNINITIALIZED)
        self.btn_retry.setVisible(mode is UiMode.FETCH_ERROR)
        self.ready_box.setVisible(mode is UiMode.READY)

        self.act_connect.setEnabled(mode is UiMode.DISCONNECTED)
        self.act_disconnect.setEnabled(view.identity is not None)
        self.act_refresh.setEnabled(view.identity is not None and mode is not UiMode.INITIALIZING)

        if self.link_edit.text() != view.draft_input:
            self.link_edit.blockSignals(True)
            self.link_edit.setText(view.draft_input)
            self.link_edit.blockSignals(False)

        self._render_entries(view)

        if view.error_message:
            self.statusBar().showMessage(view.error_message)
        else:
            self.statusBar().showMessage(mode.value)

    def _render_entries(self, view: ViewState) -> None:
        self.table.setRowCount(0)
        for link, user, pending in zip(view.entries, view.submitted_by, view.provisional):
            row = self.table.rowCount()
            self.table.insertRow(row)

            it_link = QTableWidgetItem(link)
            it_link.setToolTip(link)
            it_user = QTableWidgetItem(user)
            it_status = QTableWidgetItem("Pending" if pending else "On-chain")
            if pending:
                it_link.setForeground(_PENDING_COLOR)
                it_status.setForeground(_PENDING_COLOR)

            self.table.setItem(row, 0, it_link)
            self.table.setItem(row, 1, it_user)
            self.table.setItem(row, 2, it_status)

        self.table.resizeRowsToContents()

    # ---------------- Actions ----------------

    def connect_wallet(self) -> None:
        self._spawn(self.controller.connect())

    def disconnect_wallet(self) -> None:
        self._spawn(self.controller.disconnect())

    def refresh(self) -> None:
        self._spawn(self.controller.refresh())

    def initialize_record(self) -> None:
        self._spawn(self.controller.initialize_record())

    def submit(self) -> None:
        self._spawn(self.controller.submit())

    def _approve_wallet(self, public_key: str) -> asyncio.Future:
        # non-modal: a nested exec() would re-enter the asyncio loop
        fut = asyncio.get_running_loop().create_future()
        dlg = ConnectWalletDialog(self, public_key=public_key, app_name=storage.APP_NAME, network=storage.NETWORK)

        def _answer(ok: bool) -> None:
            if not fut.done():
                fut.set_result(ok)

        dlg.accepted.connect(lambda: _answer(True))
        dlg.rejected.connect(lambda: _answer(False))
        dlg.finished.connect(dlg.deleteLater)
        dlg.open()
        return fut

    # ---------------- Close ----------------

    def closeEvent(self, event) -> None:
        if not self.controller.has_pending_writes:
            self._teardown()
            event.accept()
            return

        resp = QMessageBox.question(
            self,
            "Request pending",
            "A request to the ledger is still pending.\n\nExit anyway?",
            QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No
        )
        if resp != QMessageBox.StandardButton.Yes:
            event.ignore()
            return
        self._teardown()
        event.accept()

    def _teardown(self) -> None:
        self._unsubscribe()
        self.controller.close()
        for task in list(self._tasks):
            task.cancel()


# -----------------------------
# Entry point
# -----------------------------

def main() -> None:
    logging.basicConfig(
        level=storage.log_level(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = QApplication([])
    app.setStyleSheet(DARK_QSS)

    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)

    pump = QTimer()
    pump.setInterval(15)
    pump.timeout.connect(lambda: _pump(loop))
    pump.start()

    w = LinkBoardWindow(loop)
    w.show()
    w.start()
    try:
        app.exec()
    finally:
        pump.stop()
        # let cancelled tasks unwind before closing the loop
        loop.run_until_complete(asyncio.sleep(0))
        loop.close()


if __name__ == "__main__":
    main()
