"""
YouTube Comment Bot Scanner - Desktop Application.

A GUI application that fetches the comments of a YouTube video, scores
each one for bot-like and spam behaviour, and optionally asks Gemini
for a second opinion on the most suspicious ones.
"""

from __future__ import annotations

import logging
import os
import threading
from tkinter import filedialog, messagebox
from typing import Any, Callable, Optional, Union

import customtkinter as ctk

from analysis import AnalysisReport, analyze_video
from core.constants import (
    APP_NAME,
    APP_VERSION,
    APP_DESCRIPTION,
    COLORS,
    GEMINI_DEFAULT_MODEL,
    LOG_COLORS,
    LOG_ICONS,
    MAX_COMMENTS_DEFAULT,
    WINDOW_MIN_HEIGHT,
    WINDOW_MIN_WIDTH,
    LogLevel,
    SensitivityPreset,
    SortOption,
)
from core.settings import SettingsManager, AppSettings
from core.validators import (
    URLValidator,
    APIKeyValidator,
    MaxCommentsValidator,
    ThresholdValidator,
)
from exporter import save_to_csv, save_to_excel
from extractor import InvalidURLError, YouTubeAPIError, YouTubeCommentExtractor
from gemini_client import GeminiClassifier

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

# Suppress Google API client cache warning
logging.getLogger("googleapiclient.discovery_cache").setLevel(logging.ERROR)

# Configure CustomTkinter
ctk.set_appearance_mode("Dark")
ctk.set_default_color_theme("blue")

# Highest-scoring comments echoed to the activity log after a run
LOG_TOP_COMMENTS = 8
LOG_TOP_FLAGS = 6


# =============================================================================
# MAIN APPLICATION CLASS
# =============================================================================

class App(ctk.CTk):
    """Main application window."""

    SIDEBAR_WIDTH = 280

    def __init__(self):
        super().__init__()

        # State
        self.settings_manager = SettingsManager()
        self.settings = self.settings_manager.load()
        self.is_running = False

        # Last report (protected by lock for thread safety)
        self._data_lock = threading.Lock()
        self.report: Optional[AnalysisReport] = None

        # Window configuration
        self.title(APP_NAME)
        self.geometry(f"{self.settings.window_width}x{self.settings.window_height}")
        self.minsize(WINDOW_MIN_WIDTH, WINDOW_MIN_HEIGHT)
        self.configure(fg_color=COLORS["bg_dark"])

        # Grid configuration - header on top, sidebar + main content below
        self.grid_columnconfigure(0, weight=0)  # Sidebar - fixed width
        self.grid_columnconfigure(1, weight=1)  # Main content - expandable
        self.grid_rowconfigure(0, weight=0)  # Header - fixed height
        self.grid_rowconfigure(1, weight=1)  # Content area - expandable

        # Build UI
        self._create_header()
        self._create_sidebar()
        self._create_main_content()

        # Bind keyboard shortcuts
        self.bind("<Control-Return>", lambda e: self.start_analysis())
        self.bind("<Control-s>", lambda e: self.export_csv())
        self.bind("<Control-e>", lambda e: self.export_excel())

        # Handle window close
        self.protocol("WM_DELETE_WINDOW", self._on_closing)

        self._apply_settings(self.settings)
        self.log_message(self.settings_manager.get_storage_info(), LogLevel.MUTED)

    # =========================================================================
    # WIDGET FACTORIES
    # =========================================================================

    @staticmethod
    def _font(size: int = 12, bold: bool = False) -> ctk.CTkFont:
        return ctk.CTkFont(size=size, weight="bold" if bold else "normal")

    def _label(self, parent, text: str = "", size: int = 12, bold: bool = False,
               color: str = "text_primary", **kwargs) -> ctk.CTkLabel:
        return ctk.CTkLabel(
            parent, text=text, font=self._font(size, bold),
            text_color=COLORS.get(color, color), **kwargs
        )

    def _entry(self, parent, placeholder: str = "", height: int = 32, **kwargs) -> ctk.CTkEntry:
        return ctk.CTkEntry(
            parent, placeholder_text=placeholder, height=height, font=self._font(12),
            fg_color=COLORS["bg_input"], border_color=COLORS["border"], corner_radius=6,
            **kwargs
        )

    def _card(self, parent) -> ctk.CTkFrame:
        return ctk.CTkFrame(
            parent, fg_color=COLORS["bg_card"], corner_radius=12,
            border_width=1, border_color=COLORS["border"]
        )

    @staticmethod
    def _row(parent, **pack) -> ctk.CTkFrame:
        """Transparent frame, packed full width."""
        frame = ctk.CTkFrame(parent, fg_color="transparent")
        frame.pack(fill="x", **pack)
        return frame

    def _labelled_row(self, parent, text: str) -> ctk.CTkFrame:
        """Row with a caption on the left; the caller packs a control on the right."""
        row = self._row(parent, pady=(0, 12))
        self._label(row, text).pack(side="left")
        return row

    # =========================================================================
    # LAYOUT
    # =========================================================================

    def _create_header(self) -> None:
        header = ctk.CTkFrame(self, fg_color=COLORS["bg_card"], corner_radius=0, height=80)
        header.grid(row=0, column=0, columnspan=2, sticky="ew")
        header.grid_propagate(False)

        inner = ctk.CTkFrame(header, fg_color="transparent")
        inner.pack(fill="both", expand=True, padx=30, pady=15)
        self._label(inner, f"🤖 {APP_NAME}", size=22, bold=True).pack(anchor="w")
        self._label(inner, APP_DESCRIPTION, size=13, color="text_secondary").pack(anchor="w", pady=(2, 0))

    def _create_sidebar(self) -> None:
        """Left sidebar: API keys, scoring options, Gemini switch."""
        self.sidebar = ctk.CTkFrame(
            self, width=self.SIDEBAR_WIDTH, fg_color=COLORS["bg_card"], corner_radius=0
        )
        self.sidebar.grid(row=1, column=0, sticky="nsew")
        self.sidebar.grid_propagate(False)

        self.sidebar_scroll = ctk.CTkScrollableFrame(
            self.sidebar,
            fg_color="transparent",
            scrollbar_button_color=COLORS["border"],
            scrollbar_button_hover_color=COLORS["accent_secondary"]
        )
        self.sidebar_scroll.pack(fill="both", expand=True)

        self._create_api_section()
        self._create_scoring_section()
        self._create_secondary_section()
        self._create_sidebar_footer()

    def _section(self, title: str, first: bool = False) -> ctk.CTkFrame:
        """Section heading (with a divider above unless first) and its body frame."""
        if not first:
            ctk.CTkFrame(self.sidebar_scroll, fg_color=COLORS["border"], height=1).pack(
                fill="x", padx=20, pady=(15, 10)
            )
        self._label(self.sidebar_scroll, title, bold=True, color="text_secondary").pack(
            anchor="w", padx=20, pady=(15 if first else 0, 10)
        )
        return self._row(self.sidebar_scroll, padx=20)

    def _create_secret_entry(self, parent: ctk.CTkFrame, placeholder: str) -> ctk.CTkEntry:
        """Masked entry with a show/hide toggle button."""
        row = self._row(parent, pady=(0, 8))
        row.grid_columnconfigure(0, weight=1)

        entry = self._entry(row, placeholder, height=36, show="*")
        entry.grid(row=0, column=0, sticky="ew")

        toggle = ctk.CTkButton(
            row, text="👁", width=36, height=36, font=self._font(12),
            fg_color=COLORS["bg_input"], hover_color=COLORS["border"],
            text_color=COLORS["text_secondary"], corner_radius=6,
        )
        toggle.configure(command=lambda: self._toggle_secret_visibility(entry, toggle))
        toggle.grid(row=0, column=1, padx=(6, 0))
        return entry

    def _create_api_section(self) -> None:
        body = self._section("API KEYS", first=True)
        self.youtube_key_entry = self._create_secret_entry(body, "YouTube Data API key")
        self.gemini_key_entry = self._create_secret_entry(body, "Gemini API key (optional)")

        storage = "🔒 Keys kept in system keyring" if self.settings_manager.keyring_available \
            else "⚠️ Keys kept in settings.json"
        self.storage_label = self._label(body, storage, size=10, color="text_muted")
        self.storage_label.pack(anchor="w")

    def _create_scoring_section(self) -> None:
        body = self._section("SCORING")

        # Threshold slider: caption row, slider, hint
        caption = self._row(body)
        self._label(caption, "Sensitivity", size=11, color="text_secondary").pack(side="left")
        self.threshold_value_label = self._label(caption, "Moderate (60)", size=11, color="accent")
        self.threshold_value_label.pack(side="right")

        self.threshold_var = ctk.DoubleVar(value=SensitivityPreset.MODERATE.value)
        self.threshold_slider = ctk.CTkSlider(
            body,
            from_=20,
            to=90,
            number_of_steps=14,
            variable=self.threshold_var,
            height=14,
            progress_color=COLORS["accent"],
            button_color=COLORS["text_primary"],
            button_hover_color=COLORS["accent_hover"],
            fg_color=COLORS["bg_input"],
            command=self._on_threshold_change
        )
        self.threshold_slider.pack(fill="x", pady=(4, 0))
        self._label(body, "Score at which a comment counts as suspicious", size=10,
                    color="text_muted").pack(anchor="w", pady=(4, 12))

        row = self._labelled_row(body, "Max Comments")
        self.max_comments_entry = self._entry(row, str(MAX_COMMENTS_DEFAULT), width=70, justify="center")
        self.max_comments_entry.pack(side="right")

        row = self._labelled_row(body, "Sort By")
        self.sort_var = ctk.StringVar(value=SortOption.SCORE.display_name)
        self.sort_dropdown = ctk.CTkOptionMenu(
            row,
            values=[option.display_name for option in SortOption],
            variable=self.sort_var,
            width=120,
            height=32,
            font=self._font(12),
            fg_color=COLORS["bg_input"],
            button_color=COLORS["accent_secondary"],
            button_hover_color=COLORS["accent"],
            dropdown_fg_color=COLORS["bg_card"],
            dropdown_hover_color=COLORS["accent_secondary"],
            corner_radius=6
        )
        self.sort_dropdown.pack(side="right")

    def _create_secondary_section(self) -> None:
        body = self._section("AI SECOND OPINION")

        self.secondary_var = ctk.BooleanVar(value=False)
        self.secondary_switch = ctk.CTkSwitch(
            body,
            text="Ask Gemini",
            variable=self.secondary_var,
            font=self._font(12),
            text_color=COLORS["text_primary"],
            progress_color=COLORS["accent"],
            button_color=COLORS["text_primary"],
            button_hover_color=COLORS["text_secondary"],
            command=self._on_secondary_toggle
        )
        self.secondary_switch.pack(anchor="w", pady=(0, 8))

        row = self._row(body, pady=(0, 8))
        self.model_label = self._label(row, "Model")
        self.model_label.pack(side="left")
        self.model_entry = self._entry(row, GEMINI_DEFAULT_MODEL, width=140)
        self.model_entry.pack(side="right")

        self._label(body, "Top-scoring comments only, never replaces the score", size=10,
                    color="text_muted").pack(anchor="w", pady=(0, 12))

    def _create_sidebar_footer(self) -> None:
        footer = ctk.CTkFrame(self.sidebar, fg_color="transparent")
        footer.pack(side="bottom", fill="x", padx=20, pady=15)
        self._label(footer, f"v{APP_VERSION}", size=11, color="text_muted").pack(side="left")
        self._label(footer, "Ctrl+Enter: Analyze", size=10, color="text_muted").pack(side="right")

    def _create_main_content(self) -> None:
        self.main_frame = ctk.CTkFrame(self, fg_color="transparent")
        self.main_frame.grid(row=1, column=1, sticky="nsew", padx=20, pady=20)
        self.main_frame.grid_columnconfigure(0, weight=1)
        self.main_frame.grid_rowconfigure(2, weight=1)  # log grows

        self._create_url_section()
        self._create_progress_section()
        self._create_log_section()

    def _action_button(self, parent, text: str, command, width: int, primary: bool = False) -> ctk.CTkButton:
        return ctk.CTkButton(
            parent,
            text=text,
            command=command,
            width=width,
            height=40,
            font=self._font(14 if primary else 13, bold=True),
            fg_color=COLORS["accent"] if primary else COLORS["accent_secondary"],
            hover_color=COLORS["accent_hover"] if primary else COLORS["border"],
            corner_radius=8,
            state="normal" if primary else "disabled",
        )

    def _create_url_section(self) -> None:
        """Video URL entry with live validation, Analyze and export buttons."""
        card = self._card(self.main_frame)
        card.grid(row=0, column=0, sticky="ew", pady=(0, 15))

        body = self._row(card, padx=20, pady=(20, 15))
        self._label(body, "📺 Video URL", size=14, bold=True).pack(anchor="w", pady=(0, 10))

        self.url_entry = self._entry(
            body,
            "youtube.com/watch?v=...  •  youtu.be/...  •  youtube.com/shorts/...  •  video ID",
            height=40,
        )
        self.url_entry.pack(fill="x")
        self.url_entry.bind("<KeyRelease>", self._validate_url_live)

        self.url_status = self._label(body, size=11, color="text_muted")
        self.url_status.pack(anchor="e", pady=(5, 0))

        actions = self._row(card, padx=20, pady=(0, 20))
        self.analyze_button = self._action_button(
            actions, "▶  Analyze Comments", self.start_analysis, 180, primary=True
        )
        self.analyze_button.pack(side="left")
        self.export_excel_button = self._action_button(actions, "📊 Excel", self.export_excel, 90)
        self.export_excel_button.pack(side="right")
        self.export_button = self._action_button(actions, "📥 CSV", self.export_csv, 90)
        self.export_button.pack(side="right", padx=(0, 10))

    def _create_progress_section(self) -> None:
        section = ctk.CTkFrame(self.main_frame, fg_color="transparent")
        section.grid(row=1, column=0, sticky="ew", pady=(0, 15))

        status_row = self._row(section)
        self.status_label = self._label(status_row, "Ready to analyze comments", color="text_muted")
        self.status_label.pack(side="left")
        self.stats_label = self._label(status_row, color="text_muted")
        self.stats_label.pack(side="right")

        self.progress_bar = ctk.CTkProgressBar(
            section, height=6, corner_radius=3,
            fg_color=COLORS["bg_card"], progress_color=COLORS["accent"]
        )
        self.progress_bar.pack(fill="x", pady=(8, 0))
        self.progress_bar.set(0)

    def _create_log_section(self) -> None:
        """Activity log: run progress, summary, top flags and top comments."""
        card = self._card(self.main_frame)
        card.grid(row=2, column=0, sticky="nsew")
        card.grid_rowconfigure(1, weight=1)
        card.grid_columnconfigure(0, weight=1)

        header = ctk.CTkFrame(card, fg_color="transparent")
        header.grid(row=0, column=0, sticky="ew", padx=20, pady=(15, 10))
        self._label(header, "📋 Activity Log", size=14, bold=True).pack(side="left")

        self.footer_stats = self._label(header, size=11, color="text_muted")
        self.footer_stats.pack(side="right", padx=(0, 10))

        ctk.CTkButton(
            header, text="Clear", width=60, height=28, font=self._font(12),
            fg_color="transparent", hover_color=COLORS["border"],
            text_color=COLORS["text_muted"], corner_radius=6, command=self.clear_log
        ).pack(side="right")

        self.log_frame = ctk.CTkScrollableFrame(card, fg_color=COLORS["bg_input"], corner_radius=8)
        self.log_frame.grid(row=1, column=0, sticky="nsew", padx=15, pady=(0, 15))

    # =========================================================================
    # EVENT HANDLERS
    # =========================================================================

    def _on_closing(self) -> None:
        """Persist settings and close."""
        self._save_settings()
        self.destroy()

    def _toggle_secret_visibility(self, entry: ctk.CTkEntry, button: ctk.CTkButton) -> None:
        """Toggle API key visibility."""
        if entry.cget("show") == "*":
            entry.configure(show="")
            button.configure(text="🔒")
        else:
            entry.configure(show="*")
            button.configure(text="👁")

    def _on_threshold_change(self, value: float) -> None:
        """Update threshold label based on slider value."""
        threshold = int(round(value))
        self.threshold_value_label.configure(text=f"{SensitivityPreset.label_for(threshold)} ({threshold})")

    def _on_secondary_toggle(self) -> None:
        """Enable or disable the model field with the Gemini switch."""
        enabled = self.secondary_var.get()
        self.model_entry.configure(state="normal" if enabled else "disabled")
        self.model_label.configure(
            text_color=COLORS["text_primary"] if enabled else COLORS["text_muted"]
        )

    def _validate_url_live(self, event: Any = None) -> None:
        """Validate the URL as user types."""
        current_text = self.url_entry.get().strip()
        if not current_text:
            self.url_status.configure(text="", text_color=COLORS["text_muted"])
            return

        video_id = URLValidator.extract_video_id(current_text)
        if video_id:
            self.url_status.configure(text=f"✓ Video ID: {video_id}", text_color=COLORS["success"])
        else:
            self.url_status.configure(text="Not a recognised YouTube URL", text_color=COLORS["warning"])

    # =========================================================================
    # SETTINGS MANAGEMENT
    # =========================================================================

    def _apply_settings(self, settings: AppSettings) -> None:
        """Push loaded settings into the widgets."""
        if settings.youtube_api_key:
            self.youtube_key_entry.insert(0, settings.youtube_api_key)
        if settings.gemini_api_key:
            self.gemini_key_entry.insert(0, settings.gemini_api_key)

        threshold, _ = ThresholdValidator.parse(settings.suspicious_threshold)
        self.threshold_var.set(threshold)
        self._on_threshold_change(threshold)

        self.max_comments_entry.delete(0, "end")
        self.max_comments_entry.insert(0, str(MaxCommentsValidator.clamp(settings.max_comments)))

        try:
            sort_option = SortOption(settings.sort_by)
        except ValueError:
            sort_option = SortOption.SCORE
        self.sort_var.set(sort_option.display_name)

        self.model_entry.insert(0, settings.gemini_model or GEMINI_DEFAULT_MODEL)
        self.secondary_var.set(settings.use_secondary)
        self._on_secondary_toggle()

    def _collect_settings(self) -> AppSettings:
        """Read the current widget values into an AppSettings."""
        threshold, _ = ThresholdValidator.parse(self.threshold_var.get())
        max_comments, _ = MaxCommentsValidator.parse(self.max_comments_entry.get())
        return AppSettings(
            youtube_api_key=self.youtube_key_entry.get().strip(),
            gemini_api_key=self.gemini_key_entry.get().strip(),
            gemini_model=self.model_entry.get().strip() or GEMINI_DEFAULT_MODEL,
            max_comments=max_comments,
            suspicious_threshold=threshold,
            use_secondary=self.secondary_var.get(),
            sort_by=SortOption.from_display_name(self.sort_var.get()).value,
            window_width=self.winfo_width(),
            window_height=self.winfo_height(),
        )

    def _save_settings(self) -> None:
        """Save current settings."""
        self.settings = self._collect_settings()
        if not self.settings_manager.save(self.settings):
            self.log_message("Could not save settings", LogLevel.WARNING)

    # =========================================================================
    # UTILITY METHODS
    # =========================================================================

    def _get_max_comments(self) -> int:
        """Parse max comments value with validation."""
        value, warning = MaxCommentsValidator.parse(self.max_comments_entry.get())
        if warning:
            self.log_message(warning, LogLevel.WARNING)
        return value

    def clear_log(self) -> None:
        """Clear the activity log."""
        for widget in self.log_frame.winfo_children():
            widget.destroy()

    def _scroll_log_to_bottom(self) -> None:
        """Scroll the log frame to the bottom."""
        canvas = getattr(self.log_frame, "_parent_canvas", None)
        if canvas is not None:
            canvas.yview_moveto(1.0)

    def log_message(self, message: str, level: Union[LogLevel, str] = LogLevel.INFO) -> None:
        """Append a line to the activity log."""
        level = LogLevel(level)
        entry = self._label(
            self.log_frame,
            f" {LOG_ICONS[level.value]}  {message}",
            color=LOG_COLORS[level.value],
            anchor="w",
            justify="left",
            wraplength=640
        )
        entry.pack(fill="x", padx=10, pady=3)

        self.log_frame.after(10, self._scroll_log_to_bottom)

    def _update_stats(self) -> None:
        """Update statistics display."""
        with self._data_lock:
            report = self.report

        if report is None:
            self.footer_stats.configure(text="")
            return

        summary = report.summary
        self.footer_stats.configure(
            text=f"📊 {summary.total:,} comments • 🚩 {summary.suspicious:,} suspicious ({summary.suspicious_pct}%)"
        )

    def _log_report(self, report: AnalysisReport) -> None:
        """Echo the summary, top flags and top comments to the activity log."""
        summary = report.summary
        level = LogLevel.WARNING if summary.suspicious else LogLevel.SUCCESS
        self.log_message(
            f"{summary.suspicious:,} of {summary.total:,} comments suspicious "
            f"({summary.suspicious_pct}%) at threshold {report.threshold}",
            level
        )

        if summary.top_flags:
            flags = ", ".join(f"{f.flag} ({f.count})" for f in summary.top_flags[:LOG_TOP_FLAGS])
            self.log_message(f"Top flags: {flags}", LogLevel.MUTED)

        if report.verdict is not None:
            confidence = "" if report.verdict.confidence is None else f", confidence {report.verdict.confidence}"
            self.log_message(f"Gemini verdict: {report.verdict.label.value}{confidence}", LogLevel.INFO)
        if report.secondary_error:
            self.log_message(f"Gemini second opinion unavailable: {report.secondary_error}", LogLevel.WARNING)

        by_score = sorted(report.comments, key=lambda x: x.bot_score, reverse=True)
        for item in by_score[:LOG_TOP_COMMENTS]:
            if not item.is_suspicious(report.threshold):
                break
            text = item.text.replace("\n", " ")
            if len(text) > 90:
                text = text[:89] + "…"
            line = f"[{item.bot_score}] {item.comment.author_name}: {text}"
            if item.opinion is not None:
                line += f"  (AI: {item.opinion.label.display_name})"
            self.log_message(line, LogLevel.ERROR if item.bot_score >= 80 else LogLevel.WARNING)

    # =========================================================================
    # CORE FUNCTIONALITY
    # =========================================================================

    def start_analysis(self) -> None:
        """Validate inputs and start the analysis thread."""
        if self.is_running:
            return

        youtube_key = self.youtube_key_entry.get().strip()
        api_result = APIKeyValidator.validate(youtube_key, "YouTube API key")
        if not api_result:
            messagebox.showerror("Invalid API Key", api_result.error_message)
            return

        url = self.url_entry.get().strip()
        url_result = URLValidator.validate(url)
        if not url_result:
            messagebox.showerror(
                "Invalid URL",
                f"{url_result.error_message}\n\n"
                "Supported formats:\n"
                "• youtube.com/watch?v=...\n"
                "• youtu.be/...\n"
                "• youtube.com/shorts/...\n"
                "• an 11-character video ID"
            )
            return

        classifier = None
        if self.secondary_var.get():
            gemini_key = self.gemini_key_entry.get().strip()
            gemini_result = APIKeyValidator.validate(gemini_key, "Gemini API key")
            if not gemini_result:
                messagebox.showerror("Invalid API Key", gemini_result.error_message)
                return
            classifier = GeminiClassifier(
                gemini_key,
                model=self.model_entry.get().strip() or GEMINI_DEFAULT_MODEL,
            )

        self.clear_log()
        max_comments = self._get_max_comments()
        threshold, _ = ThresholdValidator.parse(self.threshold_var.get())
        sort_by = SortOption.from_display_name(self.sort_var.get())

        self._save_settings()

        # Update UI state
        self.is_running = True
        self.analyze_button.configure(state="disabled", text="Analyzing...")
        self.export_button.configure(state="disabled")
        self.export_excel_button.configure(state="disabled")
        self.progress_bar.set(0)
        self.stats_label.configure(text="")
        self.status_label.configure(text="Fetching comments...", text_color=COLORS["text_secondary"])

        with self._data_lock:
            self.report = None
        self._update_stats()

        self.log_message(f"Analyzing up to {max_comments:,} comments...", LogLevel.INFO)
        if classifier is not None:
            self.log_message(f"Gemini second opinion enabled ({classifier.model})", LogLevel.MUTED)

        thread = threading.Thread(
            target=self._analysis_thread,
            args=(url, youtube_key, classifier, max_comments, threshold, sort_by),
            daemon=True
        )
        thread.start()

    def _analysis_thread(
        self,
        url: str,
        api_key: str,
        classifier: Optional[GeminiClassifier],
        max_comments: int,
        threshold: int,
        sort_by: SortOption,
    ) -> None:
        """Background thread running the analysis."""
        extractor = YouTubeCommentExtractor(api_key)

        def on_progress(count: int) -> None:
            self.after(0, lambda c=count: self._on_fetch_progress(c, max_comments))

        try:
            video_id = extractor.get_video_id(url)
            if video_id:
                meta = extractor.fetch_video_details(video_id)
                self.after(0, lambda m=meta: self.log_message(
                    f"Video: {m.title} ({m.comment_count:,} comments, {m.view_count:,} views)", LogLevel.INFO
                ))

            report = analyze_video(
                url,
                extractor,
                classifier=classifier,
                max_comments=max_comments,
                threshold=threshold,
                sort_by=sort_by,
                progress_callback=on_progress,
            )

            with self._data_lock:
                self.report = report

            self.after(0, lambda r=report: self._on_analysis_done(r))

        except (InvalidURLError, YouTubeAPIError) as e:
            self.after(0, lambda err=str(e): self._on_analysis_failed(err))
        except Exception as e:
            logger.exception("Analysis thread error")
            self.after(0, lambda err=str(e): messagebox.showerror("Error", err))
            self.after(0, lambda err=str(e): self._on_analysis_failed(err))
        finally:
            self.after(0, self._reset_ui)

    def _on_fetch_progress(self, count: int, max_comments: int) -> None:
        self.progress_bar.set(min(1.0, count / max_comments) * 0.9)
        self.status_label.configure(
            text=f"Fetched {count:,} comments...",
            text_color=COLORS["text_secondary"]
        )
        self.stats_label.configure(text=f"{count:,} / {max_comments:,}")

    def _on_analysis_done(self, report: AnalysisReport) -> None:
        self.progress_bar.set(1.0)
        self.status_label.configure(
            text=f"✓ Completed: {report.fetched:,} comments analyzed",
            text_color=COLORS["success"]
        )
        self.log_message(f"Fetched {report.fetched:,} comments for {report.video_id}", LogLevel.SUCCESS)
        self._log_report(report)
        self._update_stats()

        if report.comments:
            self.export_button.configure(state="normal")
            self.export_excel_button.configure(state="normal")

    def _on_analysis_failed(self, error: str) -> None:
        self.status_label.configure(text="Error occurred", text_color=COLORS["error"])
        self.log_message(f"Error: {error}", LogLevel.ERROR)

    def _reset_ui(self) -> None:
        """Reset UI after the analysis completes."""
        self.is_running = False
        self.analyze_button.configure(state="normal", text="▶  Analyze Comments")

    def _exportable_report(self) -> Optional[AnalysisReport]:
        with self._data_lock:
            report = self.report
        if report is None or not report.comments:
            messagebox.showwarning("No Data", "No comments to export. Analyze a video first.")
            return None
        return report

    def _write_export(self, kind: str, filename: str, write: Callable[[], Any]) -> None:
        """Run one export and report the outcome in the log and a dialog."""
        name = os.path.basename(filename)
        try:
            write()
        except OSError as e:
            logger.exception(f"{kind} export error")
            self.log_message(f"Export failed: {e}", LogLevel.ERROR)
            messagebox.showerror("Export Error", f"Could not write {name}:\n{e}")
            return
        self.log_message(f"Exported {kind} to: {name}", LogLevel.SUCCESS)
        messagebox.showinfo("Export Successful", f"{kind} file saved:\n\n• {name}")

    def export_csv(self) -> None:
        """Export scored comments (presentation order) to CSV."""
        report = self._exportable_report()
        if report is None:
            return
        filename = filedialog.asksaveasfilename(
            defaultextension=".csv",
            filetypes=[("CSV files", "*.csv")],
            initialfile=f"{report.video_id}_comments.csv",
            title="Save Scored Comments"
        )
        if filename:
            self._write_export(
                "CSV", filename, lambda: save_to_csv(report.comments, filename, threshold=report.threshold)
            )

    def export_excel(self) -> None:
        """Export the report (Summary, Comments, Top Flags sheets) to Excel."""
        report = self._exportable_report()
        if report is None:
            return
        filename = filedialog.asksaveasfilename(
            defaultextension=".xlsx",
            filetypes=[("Excel files", "*.xlsx")],
            initialfile=f"{report.video_id}_report.xlsx",
            title="Save Analysis Report"
        )
        if filename:
            self._write_export("Excel", filename, lambda: save_to_excel(report, filename))


# =============================================================================
# MAIN ENTRY POINT
# =============================================================================

def main():
    """Main entry point for the application."""
    app = App()
    app.mainloop()


if __name__ == "__main__":
    main()
