import customtkinter as ctk
from tkinter import messagebox
from ui.tasks import TaskRunner
from ui.theme import COLORS, FONTS, STYLES, configure_theme, row_style


class BackupGUI(ctk.CTk):
    def __init__(self, core):
        super().__init__()
        configure_theme()
        self.title("Elden Ring Save Manager")
        self.geometry("820x560")
        self.core = core
        self.selected_backup = None
        self.backups = []
        self.action_buttons = []
        self.tasks = TaskRunner(lambda fn: self.after(0, fn), self._on_busy_change)
        self.configure(fg_color=COLORS["background"])
        self.create_widgets()
        self.refresh()

    def create_widgets(self):
        self.grid_columnconfigure(1, weight=1)
        self.grid_rowconfigure(0, weight=1)

        sidebar = ctk.CTkFrame(self, **STYLES["frame"])
        sidebar.grid(row=0, column=0, sticky="ns", padx=10, pady=10)

        ctk.CTkLabel(sidebar, text="Backup Location:",
                     font=FONTS["small"], text_color=COLORS["text"]).pack(anchor="w", padx=5)
        self.location_entry = ctk.CTkEntry(sidebar, width=220, **STYLES["entry"])
        self.location_entry.pack(fill="x", padx=5, pady=(0, 8))

        ctk.CTkLabel(sidebar, text="Active Save:",
                     font=FONTS["small"], text_color=COLORS["text"]).pack(anchor="w", padx=5)
        self.save_label = ctk.CTkLabel(sidebar, text="", font=FONTS["small"],
                                       text_color=COLORS["gold"], wraplength=220, justify="left")
        self.save_label.pack(anchor="w", padx=5, pady=(0, 12))

        buttons = [
            ("Create Backup", self.create_backup),
            ("Quick Backup", self.quick_backup),
            ("Restore Backup", self.restore_backup),
            ("Delete Backup", self.delete_backup),
            ("Prune Missing", self.prune_missing),
            ("Refresh", self.refresh)
        ]
        for text, cmd in buttons:
            btn = ctk.CTkButton(sidebar, text=text, command=cmd,
                                font=FONTS["button"], **STYLES["button"])
            btn.pack(fill="x", padx=5, pady=4)
            self.action_buttons.append(btn)

        self.backup_list_frame = ctk.CTkScrollableFrame(
            self,
            label_text="Backups",
            label_font=FONTS["title"],
            **STYLES["frame"]
        )
        self.backup_list_frame.grid(row=0, column=1, sticky="nsew", padx=10, pady=10)

    def run_task(self, task, on_success, refresh_on_error=True):
        """Run an engine call off the UI thread; ignored while another one is running"""
        self.tasks.run(task, on_success, lambda message: self._task_failed(message, refresh_on_error))

    def _task_failed(self, message, refresh_on_error):
        messagebox.showerror("Error", f"❌ {message}")
        if refresh_on_error:
            self.refresh()

    def _on_busy_change(self, busy):
        for btn in self.action_buttons:
            btn.configure(state="disabled" if busy else "normal")

    def refresh(self):
        def _load():
            return self.core.get_backup_location(), self.core.get_current_save(), self.core.list_backups()

        self.run_task(_load, self._populate, refresh_on_error=False)

    def _populate(self, result):
        location, current_save, backups = result
        self.location_entry.configure(state="normal")
        self.location_entry.delete(0, "end")
        self.location_entry.insert(0, location)
        self.location_entry.configure(state="readonly")
        self.save_label.configure(text=current_save)
        self.backups = backups
        self._render_backups()

    def _render_backups(self):
        backups = self.backups
        for widget in self.backup_list_frame.winfo_children():
            widget.destroy()

        names = [b["name"] for b in backups]
        if self.selected_backup not in names:
            self.selected_backup = None

        if not backups:
            ctk.CTkLabel(self.backup_list_frame, text="No backups found",
                         font=FONTS["body"], text_color=COLORS["text"]).pack(pady=10)
            return

        for backup in backups:
            text = f"{backup['name']}   {backup['backupdate']}\n{backup['description']}"
            if not backup["exists"]:
                text += "\n(folder missing)"
            ctk.CTkButton(
                self.backup_list_frame,
                text=text,
                anchor="w",
                font=FONTS["small"],
                hover_color=COLORS["gold_dark"],
                command=lambda n=backup["name"]: self.on_backup_select(n),
                **row_style(backup["name"] == self.selected_backup, not backup["exists"])
            ).pack(fill="x", pady=3, padx=5)

    def on_backup_select(self, name):
        self.selected_backup = None if self.selected_backup == name else name
        self._render_backups()

    def _require_selection(self):
        if not self.selected_backup:
            messagebox.showerror("Error", "No backup selected!")
            return None
        return self.selected_backup

    def create_backup(self):
        name = ctk.CTkInputDialog(text="Enter a name for the backup:", title="Create Backup").get_input()
        if not name:
            return
        description = ctk.CTkInputDialog(text="Enter a description (optional):", title="Create Backup").get_input()

        def _done(record):
            messagebox.showinfo("Result", f"✅ Backup '{record['name']}' created!")
            self.refresh()

        self.run_task(lambda: self.core.create_backup(name, description or ""), _done)

    def quick_backup(self):
        def _done(record):
            messagebox.showinfo("Result", f"✅ Backup '{record['name']}' created!")
            self.refresh()

        self.run_task(self.core.quick_backup, _done)

    def restore_backup(self):
        name = self._require_selection()
        if not name:
            return
        if not messagebox.askyesno("Confirm", f"Replace your current save with '{name}'?"):
            return

        def _done(_):
            messagebox.showinfo("Result", "✅ Restore successful!")
            self.refresh()

        self.run_task(lambda: self.core.restore_backup(name), _done)

    def delete_backup(self):
        name = self._require_selection()
        if not name:
            return
        if not messagebox.askyesno("Confirm", f"Permanently delete '{name}'?"):
            return

        def _done(_):
            self.selected_backup = None
            messagebox.showinfo("Result", "✅ Backup deleted!")
            self.refresh()

        self.run_task(lambda: self.core.delete_backup(name), _done)

    def prune_missing(self):
        def _done(removed):
            if removed:
                messagebox.showinfo("Prune", "Removed:\n" + "\n".join(removed))
            else:
                messagebox.showinfo("Prune", "Every record has its backup folder.")
            self.refresh()

        self.run_task(self.core.prune_missing, _done)

    def run(self):
        self.mainloop()
