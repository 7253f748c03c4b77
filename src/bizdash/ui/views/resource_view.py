from __future__ import annotations

import tkinter as tk
from tkinter import ttk, messagebox
from dataclasses import dataclass
from typing import Any, Callable, Optional


@dataclass(frozen=True)
class FormField:
    key: str
    label: str
    # Returns [(id, label)] for a combobox; None means a plain entry.
    choices: Optional[Callable[[Any], list[tuple[int, str]]]] = None
    default: Callable[[], str] = lambda: ""


@dataclass(frozen=True)
class Column:
    key: str
    heading: str
    width: int = 110


@dataclass(frozen=True)
class ViewConfig:
    """Everything that differs between manager tabs; ResourceView does the rest."""
    title: str
    service: str
    columns: list[Column]
    fields: list[FormField]
    row: Callable[[Any, Any], tuple]
    form_values: Callable[[Any], dict]
    summary: Callable[[list, Any], list[tuple[str, str]]] = lambda records, snap: []
    save: Optional[Callable[[Any, dict, Any, Any], None]] = None
    low_tag: Callable[[Any, Any], bool] = lambda record, snap: False
    records: Optional[Callable[[Any], list]] = None


class ResourceView:
    def __init__(self, notebook: ttk.Notebook, app, config: ViewConfig):
        self.app = app
        self.config = config
        self.frame = ttk.Frame(notebook)
        notebook.add(self.frame, text=config.title)

        self._records: dict[str, Any] = {}
        self._choice_maps: dict[str, dict[str, int]] = {}
        self._editing: Any = None
        self._snapshot = None

        self._build()

    # ---------- layout ----------
    def _build(self):
        tab = self.frame
        cfg = self.config

        self.summary_box = ttk.LabelFrame(tab, text="Summary")
        self.summary_box.pack(fill="x", padx=10, pady=(10, 4))

        left = ttk.LabelFrame(tab, text=f"{cfg.title}: add / edit", width=300)
        left.pack(side="left", fill="y", padx=(10, 6), pady=8)
        left.pack_propagate(False)

        right = ttk.LabelFrame(tab, text=f"{cfg.title} list")
        right.pack(side="right", fill="both", expand=True, padx=(0, 10), pady=8)

        self.inputs: dict[str, tk.Widget] = {}
        for i, f in enumerate(cfg.fields):
            ttk.Label(left, text=f.label).grid(row=i, column=0, sticky="w", padx=8, pady=4)
            if f.choices is not None:
                w = ttk.Combobox(left, width=22, state="readonly")
            else:
                w = ttk.Entry(left, width=24)
                w.insert(0, f.default())
            w.grid(row=i, column=1, sticky="ew", padx=8, pady=4)
            self.inputs[f.key] = w
        left.columnconfigure(1, weight=1)

        btns = ttk.Frame(left)
        btns.grid(row=len(cfg.fields), column=0, columnspan=2, sticky="ew", padx=8, pady=(6, 8))
        for c in range(3):
            btns.columnconfigure(c, weight=1)
        ttk.Button(btns, text="Save", command=self.on_save).grid(row=0, column=0, sticky="ew", padx=(0, 4))
        ttk.Button(btns, text="Delete", command=self.on_delete).grid(row=0, column=1, sticky="ew", padx=4)
        ttk.Button(btns, text="Clear", command=self.clear_form).grid(row=0, column=2, sticky="ew", padx=(4, 0))

        self.mode_var = tk.StringVar(value="New record")
        ttk.Label(left, textvariable=self.mode_var).grid(row=len(cfg.fields) + 1, column=0, columnspan=2, sticky="w", padx=8)

        wrap = ttk.Frame(right)
        wrap.pack(fill="both", expand=True, padx=6, pady=6)

        cols = tuple(c.key for c in cfg.columns)
        self.tree = ttk.Treeview(wrap, columns=cols, show="headings", height=18)
        for c in cfg.columns:
            self.tree.heading(c.key, text=c.heading)
            self.tree.column(c.key, width=c.width, anchor="w")
        self.tree.tag_configure("low", background="#ffdddd")
        self.tree.bind("<<TreeviewSelect>>", self.on_select)

        vsb = ttk.Scrollbar(wrap, orient="vertical", command=self.tree.yview)
        self.tree.configure(yscrollcommand=vsb.set)
        self.tree.grid(row=0, column=0, sticky="nsew")
        vsb.grid(row=0, column=1, sticky="ns")
        wrap.columnconfigure(0, weight=1)
        wrap.rowconfigure(0, weight=1)

    # ---------- data ----------
    @property
    def service(self):
        return getattr(self.app.container, self.config.service)

    def refresh(self, snapshot):
        self._snapshot = snapshot
        cfg = self.config
        records = cfg.records(snapshot) if cfg.records else getattr(snapshot, self.service.resource)

        for iid in self.tree.get_children():
            self.tree.delete(iid)
        self._records = {}
        for rec in records:
            tags = ("low",) if cfg.low_tag(rec, snapshot) else ()
            iid = self.tree.insert("", "end", values=cfg.row(rec, snapshot), tags=tags)
            self._records[iid] = rec

        for f in cfg.fields:
            if f.choices is None:
                continue
            pairs = f.choices(snapshot)
            labels = [label if pid == label else f"{pid} — {label}" for pid, label in pairs]
            self._choice_maps[f.key] = dict(zip(labels, (pid for pid, _ in pairs)))
            self.inputs[f.key]["values"] = labels

        for child in self.summary_box.winfo_children():
            child.destroy()
        for i, (label, value) in enumerate(cfg.summary(records, snapshot)):
            ttk.Label(self.summary_box, text=label, style="KPI.TLabel").grid(row=0, column=i * 2, sticky="w", padx=(10, 4), pady=6)
            ttk.Label(self.summary_box, text=value, style="KPIValue.TLabel").grid(row=0, column=i * 2 + 1, sticky="w", padx=(0, 16), pady=6)

    def _read_form(self) -> dict:
        data = {}
        for f in self.config.fields:
            raw = self.inputs[f.key].get().strip()
            data[f.key] = self._choice_maps.get(f.key, {}).get(raw, raw or None) if f.choices else raw
        return data

    def _write_form(self, values: dict):
        for f in self.config.fields:
            w = self.inputs[f.key]
            value = values.get(f.key)
            if f.choices is not None:
                label = next((lab for lab, pid in self._choice_maps.get(f.key, {}).items() if pid == value), "")
                w.set(label)
            else:
                w.delete(0, tk.END)
                w.insert(0, "" if value is None else str(value))

    # ---------- actions ----------
    def on_select(self, _evt=None):
        sel = self.tree.selection()
        if not sel:
            return
        rec = self._records.get(sel[0])
        if rec is None:
            return
        self._editing = rec
        self._write_form(self.config.form_values(rec))
        self.mode_var.set(f"Editing #{getattr(rec, 'id', '?')}")

    def on_save(self):
        try:
            data = self._read_form()
            if self.config.save is not None:
                self.config.save(self.app.container, data, self._editing, self._snapshot)
            elif self._editing is not None:
                self.service.update(self._editing.id, data, existing=self._editing)
            else:
                self.service.create(data)
            self.app.toast(f"{self.config.title}: saved.", kind="success")
            self.clear_form()
            self.app.refresh_all()
        except Exception as e:
            self.app.handle_error("Save failed", e, f"Could not save {self.config.title.lower()} record.")

    def on_delete(self):
        rec = self._editing
        if rec is None:
            self.app.toast("Select a record first.", kind="warn")
            return
        if not messagebox.askyesno("Confirm delete", f"Delete record #{rec.id}?", parent=self.frame):
            return
        try:
            self.service.delete(rec.id)
            self.app.toast(f"{self.config.title}: deleted.", kind="success")
            self.clear_form()
            self.app.refresh_all()
        except Exception as e:
            self.app.handle_error("Delete failed", e, f"Could not delete {self.config.title.lower()} record.")

    def clear_form(self):
        self._editing = None
        self.tree.selection_remove(self.tree.selection())
        for f in self.config.fields:
            w = self.inputs[f.key]
            if f.choices is not None:
                w.set("")
            else:
                w.delete(0, tk.END)
                w.insert(0, f.default())
        self.mode_var.set("New record")

    def select_record(self, record_id: int):
        for iid, rec in self._records.items():
            if rec.id == record_id:
                self.tree.selection_set(iid)
                self.tree.see(iid)
                return
