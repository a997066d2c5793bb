# ui_dialogs.py
from __future__ import annotations

from PyQt6.QtWidgets import (
    QDialog,
    QVBoxLayout,
    QGridLayout,
    QLabel,
    QLineEdit,
    QDialogButtonBox,
    QWidget,
)


class ConnectWalletDialog(QDialog):
    """
    Approval prompt shown by the local wallet on an interactive connect.
    Accept = trust this app, Reject = UserRejected.
    """

    def __init__(
        self,
        parent=None,
        public_key: str = "",
        app_name: str = "",
        network: str = "",
    ):
        super().__init__(parent)
        self.setWindowTitle("Connect Wallet")
        self.setMinimumSize(520, 220)

        root = QVBoxLayout(self)
        root.setContentsMargins(16, 16, 16, 16)
        root.setSpacing(12)

        intro = QLabel(f"{app_name or 'This app'} wants to connect to your wallet.")
        intro.setStyleSheet("font-size: 13pt; font-weight: 600;")
        intro.setWordWrap(True)
        root.addWidget(intro)

        # =====================
        # Account details
        # =====================
        meta = QWidget()
        grid = QGridLayout(meta)
        grid.setHorizontalSpacing(12)
        grid.setVerticalSpacing(8)

        self.key_edit = QLineEdit(public_key)
        self.key_edit.setReadOnly(True)

        self.network_edit = QLineEdit(network)
        self.network_edit.setReadOnly(True)

        grid.addWidget(QLabel("Account:"), 0, 0)
        grid.addWidget(self.key_edit, 0, 1)
        grid.addWidget(QLabel("Network:"), 1, 0)
        grid.addWidget(self.network_edit, 1, 1)
        grid.setColumnStretch(1, 1)
        root.addWidget(meta)

        note = QLabel("The app will see your public address. It cannot move funds without asking.")
        note.setStyleSheet("color: #bdbdbd;")
        note.setWordWrap(True)
        root.addWidget(note)

        root.addStretch(1)

        buttons = QDialogButtonBox(
            QDialogButtonBox.StandardButton.Ok
            | QDialogButtonBox.StandardButton.Cancel
        )
        buttons.button(QDialogButtonBox.StandardButton.Ok).setText("Connect")
        buttons.button(QDialogButtonBox.StandardButton.Cancel).setText("Reject")
        buttons.accepted.connect(self.accept)
        buttons.rejected.connect(self.reject)
        root.addWidget(buttons)
