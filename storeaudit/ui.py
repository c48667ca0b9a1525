"""
Design (ui.py)
- Purpose: Build and manage the Tkinter UI (history Treeview grouped by audit type, details
           pane, audit form dialog, import/export dialogs, logs panel).
- Inputs: AuditRepo (shared state) and the key-value store (device name).
- Outputs: None (renders UI, writes to AuditRepo).
- Side effects: Creates windows; reads/writes export files chosen by the user; OS notifications.
- Thread-safety: UI code runs on main thread; the log handler reschedules appends via Tk.after().
"""

import logging
import tkinter as tk
from datetime import datetime
from tkinter import filedialog, messagebox, simpledialog, ttk
from typing import Callable, Dict, List

from .builder import build_audit
from .checklists import CHECKLISTS, checklist_names
from .config import APP_TITLE, DEFAULT_AUDIT_TYPE, LOG_MAX_LINES, OUTS_ROWS
from .repository import AuditRepo
from .storage import KeyValueStore, get_device_name, set_device_name
from .summary import HistoryRow, details_text, history_rows, tally_line
from .transfer import ImportFormatError, dump_export, export_audits, export_filename, import_audits
from .utils import notify
from .widgets import NotesWidget, OutsWidget, Widget, YesNoNAWidget, YesNoWidget

logger = logging.getLogger(__name__)

BG = "#1e1e1e"
PANEL = "#2b2b2b"
FG = "#f0f0f0"


class TkLogHandler(logging.Handler):
    """Forward log records into the Logs panel (any thread -> main thread)."""

    def __init__(self, root: tk.Misc, append: Callable[[str], None]) -> None:
        super().__init__(level=logging.INFO)
        self.root = root
        self.append = append
        self.setFormatter(logging.Formatter("[%(asctime)s] %(message)s", "%Y-%m-%d %H:%M:%S"))

    def emit(self, record: logging.LogRecord) -> None:
        try:
            line = self.format(record) + "\n"
            self.root.after(0, lambda: self.append(line))
        except Exception:
            self.handleError(record)


class AppUI:
    """
    Design (AppUI)
    - Purpose: Encapsulate all UI creation and behavior.
    - Public attributes:
        enable_notifications (tk.BooleanVar): toggles system notifications
        show_logs (tk.BooleanVar): toggles visibility of the logs panel
        checklist (tk.StringVar): checklist used by "New Audit"
    - Tree rows: one parent row per audit type, one child row per audit (see summary.history_rows);
      _rows maps each tree iid back to its HistoryRow.
    """

    def __init__(self, root: tk.Tk, repo: AuditRepo, kv: KeyValueStore):
        self.root = root
        self.repo = repo
        self.kv = kv
        self._rows: Dict[str, HistoryRow] = {}

        # UI state variables
        self.enable_notifications = tk.BooleanVar(value=True)
        self.show_logs = tk.BooleanVar(value=False)
        names = checklist_names()
        self.checklist = tk.StringVar(value=names[0] if names else DEFAULT_AUDIT_TYPE)

        # Window
        self.root.title(APP_TITLE)
        self.root.rowconfigure(0, weight=1)
        self.root.columnconfigure(0, weight=1)
        self.root.configure(bg=BG)

        # Paned window: top = history + details + buttons, bottom = logs (when shown)
        self.paned = ttk.PanedWindow(self.root, orient=tk.VERTICAL)
        self.paned.grid(row=0, column=0, sticky="nsew")

        content_frame = tk.Frame(self.paned, bg=BG)
        content_frame.rowconfigure(0, weight=1)
        content_frame.columnconfigure(0, weight=3)
        content_frame.columnconfigure(1, weight=2)
        self.paned.add(content_frame, weight=1)

        self.bottom_frame = tk.Frame(self.paned, bg=BG)
        self.logs_box = tk.Text(self.bottom_frame, height=6, bg="#1b1b1b", fg="#dddddd", wrap="none")
        self.logs_box.configure(state="disabled")
        self.logs_box.pack(fill=tk.BOTH, expand=True, padx=10, pady=(0, 6))
        self.logs_box.pack_forget()  # hidden by default
        self.paned.add(self.bottom_frame, weight=0)

        def _keep_sash_collapsed(_event=None):
            """When Logs is unchecked, keep sash at bottom so window can resize down."""
            if not self.show_logs.get():
                self.paned.update_idletasks()
                total = self.paned.winfo_height()
                if total > 0:
                    self.paned.sashpos(0, total)

        self.paned.bind("<Configure>", _keep_sash_collapsed)

        # Style
        style = ttk.Style(self.root)
        style.theme_use("default")
        style.configure(
            "Treeview",
            background=PANEL,
            foreground=FG,
            fieldbackground=PANEL,
            rowheight=24,
            font=("Segoe UI", 10),
        )
        style.configure(
            "Treeview.Heading",
            background=BG,
            foreground="#ffffff",
            font=("Segoe UI", 10, "bold"),
        )
        style.map("Treeview", background=[("selected", "#444")], foreground=[])

        # History tree
        self.columns = ("meta", "tally")
        self.tree = ttk.Treeview(content_frame, columns=self.columns, show="tree headings")
        self.tree.grid(row=0, column=0, sticky="nsew", padx=(10, 5), pady=(10, 5))
        self.tree.heading("#0", text="Audit")
        self.tree.heading("meta", text="Date / Auditor / Saved")
        self.tree.heading("tally", text="Answers")
        self.tree.column("#0", width=180)
        self.tree.column("meta", width=320)
        self.tree.column("tally", width=200)
        self.tree.tag_configure("group", foreground="#7CFC00")
        self.tree.bind("<<TreeviewSelect>>", self.on_select)

        self.details_box = tk.Text(content_frame, bg=PANEL, fg="white", wrap="word", width=40)
        self.details_box.grid(row=0, column=1, sticky="nsew", padx=(5, 10), pady=(10, 5))
        self.details_box.configure(state="disabled")

        # Buttons & toggles
        button_frame = tk.Frame(content_frame, bg=BG)
        button_frame.grid(row=1, column=0, columnspan=2, sticky="ew", padx=10, pady=(0, 10))

        ttk.Combobox(button_frame, textvariable=self.checklist, values=names, state="readonly", width=12).pack(side=tk.LEFT, padx=5)
        ttk.Button(button_frame, text="New Audit", command=self.new_audit).pack(side=tk.LEFT, padx=5)
        ttk.Button(button_frame, text="Delete", command=self.delete_selected).pack(side=tk.LEFT, padx=5)
        ttk.Button(button_frame, text="Delete All", command=self.delete_all).pack(side=tk.LEFT, padx=5)
        ttk.Button(button_frame, text="Export", command=self.export).pack(side=tk.LEFT, padx=5)
        ttk.Button(button_frame, text="Import", command=self.import_file).pack(side=tk.LEFT, padx=5)
        ttk.Button(button_frame, text="Device Name", command=self.edit_device_name).pack(side=tk.LEFT, padx=5)

        tk.Checkbutton(
            button_frame,
            text="Enable Notifications",
            variable=self.enable_notifications,
            fg="white",
            bg=BG,
            selectcolor=PANEL,
            activebackground=BG,
            activeforeground="white",
        ).pack(side=tk.LEFT, padx=5)

        tk.Checkbutton(
            button_frame,
            text="Show Logs",
            variable=self.show_logs,
            fg="white",
            bg=BG,
            selectcolor=PANEL,
            command=self.toggle_logs,
        ).pack(side=tk.LEFT, padx=5)

        # Core modules log through the standard logging tree; mirror INFO+ into the panel
        logging.getLogger("storeaudit").addHandler(TkLogHandler(self.root, self._append_log))

        # Initial paint
        self.refresh_ui()

    # ---------- UI callbacks & utilities ----------

    def toggle_logs(self) -> None:
        """Show logs in bottom pane. Resize pane to show/hide."""
        if self.show_logs.get():
            self.paned.pane(self.bottom_frame, weight=1)
            self.logs_box.pack(fill=tk.BOTH, expand=True, padx=10, pady=(0, 6))
            self.paned.update_idletasks()
            total = self.paned.winfo_height()
            if total > 0:
                self.paned.sashpos(0, int(total * 0.8))
        else:
            self.logs_box.pack_forget()
            self.paned.pane(self.bottom_frame, weight=0)
            self.paned.update_idletasks()
            total = self.paned.winfo_height()
            if total > 0:
                self.paned.sashpos(0, total)

    def refresh_ui(self) -> None:
        """
        Purpose: Rebuild the tree from the repository, grouped by audit type.
        Side effects: Mutates Treeview items (UI only); clears the details pane.
        Thread-safety: Must run on main thread.
        """
        self.tree.delete(*self.tree.get_children())
        rows = history_rows(self.repo.group_by_type())
        self._rows = {row.iid: row for row in rows}
        if not rows:
            self.tree.insert("", "end", iid="empty", text="No audits submitted yet.")
        for row in rows:
            is_group = row.audit_id is None
            self.tree.insert(
                row.parent, "end", iid=row.iid, text=row.text, values=row.values,
                open=is_group, tags=("group",) if is_group else (),
            )
        self._set_details("")

    def on_select(self, _event=None) -> None:
        audit_id = self._selected_audit_id()
        if audit_id is None:
            self._set_details("")
            return
        audit = self.repo.get(audit_id)
        self._set_details(details_text(audit) if audit else "")

    def _selected_row(self) -> HistoryRow | None:
        selected = self.tree.selection()
        if not selected:
            return None
        return self._rows.get(selected[0])

    def _selected_audit_id(self) -> str | None:
        row = self._selected_row()
        return row.audit_id if row else None

    def _selected_type(self) -> str | None:
        """Audit type of the selected group row or audit row; None when nothing is selected."""
        row = self._selected_row()
        return row.audit_type if row else None

    def _set_details(self, text: str) -> None:
        self.details_box.configure(state="normal")
        self.details_box.delete("1.0", "end")
        self.details_box.insert("end", text)
        self.details_box.configure(state="disabled")

    def _notify(self, title: str, message: str) -> None:
        if self.enable_notifications.get():
            notify(title, message)

    # ---------- internal helper for Logs ----------

    def _append_log(self, text: str) -> None:
        """
        Purpose: Append one line to the Logs panel and trim to LOG_MAX_LINES.
        Thread-safety: Main thread only (called via after()).
        """
        self.logs_box.configure(state="normal")
        self.logs_box.insert("end", text)
        self.logs_box.see("end")
        total_lines = int(self.logs_box.index("end-1c").split(".")[0])
        if total_lines > LOG_MAX_LINES:
            remove = total_lines - LOG_MAX_LINES
            self.logs_box.delete("1.0", f"{remove + 1}.0")
        self.logs_box.configure(state="disabled")

    # ---------- Audit actions ----------

    def new_audit(self) -> None:
        checklist = CHECKLISTS.get(self.checklist.get())
        if checklist is None:
            return
        AuditFormDialog(self.root, checklist.audit_type, checklist.instantiate(), self._save_submission)

    def _save_submission(self, submission: Dict[str, str], layout: List[Widget]) -> None:
        record = build_audit(submission, layout, device_name=get_device_name(self.kv))
        self.repo.append(record)
        self.refresh_ui()
        self._notify("Audit saved", f"{record.audit_type} audit saved ({tally_line(record)})")

    def delete_selected(self) -> None:
        audit_id = self._selected_audit_id()
        if audit_id is None:
            messagebox.showinfo("Delete", "Select an audit to delete.")
            return
        if not messagebox.askyesno("Delete", "Delete this audit?"):
            return
        self.repo.remove(audit_id)
        self.refresh_ui()

    def delete_all(self) -> None:
        if not messagebox.askyesno("Delete All", "Delete every saved audit? This cannot be undone."):
            return
        self.repo.clear()
        self.refresh_ui()

    def export(self) -> None:
        """Export the selected audit type (or everything when nothing is selected) to a JSON file."""
        audit_type = self._selected_type()
        path = filedialog.asksaveasfilename(
            parent=self.root,
            title="Export audits",
            initialfile=export_filename(audit_type),
            defaultextension=".json",
            filetypes=[("JSON", "*.json"), ("All files", "*.*")],
        )
        if not path:
            return
        doc = export_audits(self.repo, audit_type, get_device_name(self.kv))
        try:
            with open(path, "w", encoding="utf-8") as f:
                f.write(dump_export(doc))
        except OSError as exc:
            logger.error("Export to %s failed: %s", path, exc)
            messagebox.showerror("Export", f"Could not write file:\n{exc}")
            return
        self._notify("Export complete", f"{len(doc['audits'])} audit(s) exported")

    def import_file(self) -> None:
        path = filedialog.askopenfilename(
            parent=self.root,
            title="Import audits",
            filetypes=[("JSON", "*.json"), ("All files", "*.*")],
        )
        if not path:
            return
        try:
            with open(path, "rb") as f:
                payload = f.read()
            result = import_audits(self.repo, payload)
        except OSError as exc:
            messagebox.showerror("Import", f"Could not read file:\n{exc}")
            return
        except ImportFormatError as exc:
            logger.warning("Import of %s rejected: %s", path, exc)
            messagebox.showerror("Import", str(exc))
            return
        self.refresh_ui()
        message = f"Added {result.added}, skipped {result.skipped} duplicate(s)."
        messagebox.showinfo("Import", message)
        self._notify("Import complete", message)

    def edit_device_name(self) -> None:
        name = simpledialog.askstring(
            "Device Name", "Name of this device (stamped on audits and exports):",
            initialvalue=get_device_name(self.kv), parent=self.root,
        )
        if name is None:
            return
        set_device_name(self.kv, name)
        logger.info("Device name set to %r", name.strip())


class AuditFormDialog:
    """
    Design (AuditFormDialog)
    - Purpose: Render one checklist layout as a form and hand the flat submission back.
    - Each widget keeps Tk variables for its answers; on Save they are encoded through
      Widget.fields(), so the submission uses the same field names the builder decodes.
    - Radio groups start with nothing selected ("" = unanswered).
    """

    def __init__(self, root: tk.Misc, audit_type: str, layout: List[Widget],
                 on_save: Callable[[Dict[str, str], List[Widget]], None]):
        self.layout = layout
        self.on_save = on_save
        self.answers: Dict[str, Dict[str, Callable[[], str]]] = {}

        self.win = tk.Toplevel(root)
        self.win.title(f"{audit_type} Audit")
        self.win.configure(bg=BG)

        now = datetime.now()
        self.header = {
            "audit_type": tk.StringVar(value=audit_type),
            "auditor": tk.StringVar(),
            "audit_date": tk.StringVar(value=now.strftime("%Y-%m-%d")),
            "audit_time": tk.StringVar(value=now.strftime("%H:%M")),
        }
        head = tk.Frame(self.win, bg=BG)
        head.pack(fill=tk.X, padx=10, pady=(10, 5))
        for row, (name, text) in enumerate(
            (("audit_type", "Audit Type"), ("auditor", "Auditor"), ("audit_date", "Date"), ("audit_time", "Time"))
        ):
            tk.Label(head, text=text, fg="white", bg=BG).grid(row=row, column=0, sticky="e", padx=5, pady=2)
            tk.Entry(head, textvariable=self.header[name]).grid(row=row, column=1, sticky="w", padx=5, pady=2)
        tk.Label(head, text="Header Notes", fg="white", bg=BG).grid(row=4, column=0, sticky="ne", padx=5, pady=2)
        self.header_notes = tk.Text(head, height=3, width=50, bg=PANEL, fg="white")
        self.header_notes.grid(row=4, column=1, sticky="w", padx=5, pady=2)

        # Scrollable question area
        body = tk.Frame(self.win, bg=BG)
        body.pack(fill=tk.BOTH, expand=True, padx=10)
        canvas = tk.Canvas(body, bg=BG, highlightthickness=0, width=560, height=420)
        scroll = ttk.Scrollbar(body, orient=tk.VERTICAL, command=canvas.yview)
        self.questions = tk.Frame(canvas, bg=BG)
        self.questions.bind("<Configure>", lambda _e: canvas.configure(scrollregion=canvas.bbox("all")))
        canvas.create_window((0, 0), window=self.questions, anchor="nw")
        canvas.configure(yscrollcommand=scroll.set)
        canvas.pack(side=tk.LEFT, fill=tk.BOTH, expand=True)
        scroll.pack(side=tk.RIGHT, fill=tk.Y)

        for widget in layout:
            self.answers[widget.key] = self._render(widget)

        ttk.Button(self.win, text="Save", command=self.save).pack(pady=10)

    # ---------- rendering ----------

    def _radio_row(self, parent: tk.Misc, label: str, choices) -> tk.StringVar:
        row = tk.Frame(parent, bg=BG)
        row.pack(fill=tk.X, pady=2)
        tk.Label(row, text=label, fg="white", bg=BG, anchor="w").pack(side=tk.LEFT)
        var = tk.StringVar(value="")
        for choice in reversed(choices):
            tk.Radiobutton(
                row, text=choice, value=choice, variable=var,
                fg="white", bg=BG, selectcolor=PANEL, activebackground=BG,
            ).pack(side=tk.RIGHT)
        return var

    def _notes_box(self, parent: tk.Misc) -> tk.Text:
        box = tk.Text(parent, height=2, width=60, bg=PANEL, fg="white")
        box.pack(fill=tk.X, pady=(0, 4))
        return box

    def _render(self, widget: Widget) -> Dict[str, Callable[[], str]]:
        """Draw one question; return getters producing the widget's answers dict."""
        frame = tk.LabelFrame(self.questions, text="", bg=BG, fg="white", padx=6, pady=4)
        frame.pack(fill=tk.X, pady=4)
        getters: Dict[str, Callable[[], str]] = {}

        if isinstance(widget, OutsWidget):
            tk.Label(frame, text=widget.label, fg="white", bg=BG, font=("Segoe UI", 10, "bold")).pack(anchor="w")
            for row, row_label in OUTS_ROWS:
                getters[row] = self._radio_row(frame, row_label, widget.choices).get
            notes = self._notes_box(frame)
            getters["notes"] = lambda box=notes: box.get("1.0", "end-1c")
        elif isinstance(widget, YesNoNAWidget):
            getters["value"] = self._radio_row(frame, widget.label, widget.choices).get
        elif isinstance(widget, YesNoWidget):
            getters["value"] = self._radio_row(frame, widget.label, widget.choices).get
            notes = self._notes_box(frame)
            getters["notes"] = lambda box=notes: box.get("1.0", "end-1c")
        elif isinstance(widget, NotesWidget):
            tk.Label(frame, text=widget.label, fg="white", bg=BG, anchor="w").pack(fill=tk.X)
            notes = self._notes_box(frame)
            getters["notes"] = lambda box=notes: box.get("1.0", "end-1c")
        return getters

    # ---------- submit ----------

    def submission(self) -> Dict[str, str]:
        """Flat field collection for the whole form (header fields + every widget's fields)."""
        flat: Dict[str, str] = {name: var.get() for name, var in self.header.items()}
        flat["header_notes"] = self.header_notes.get("1.0", "end-1c")
        for widget in self.layout:
            answers = {name: get() for name, get in self.answers[widget.key].items()}
            flat.update(widget.fields(answers))
        return flat

    def save(self) -> None:
        self.on_save(self.submission(), self.layout)
        self.win.destroy()
