"""
Welut - UI Layout
Gradio shell: LUT library, file list with thumbnails, original/LUT previews
and batch export
"""

import html
import os
from typing import Dict, List, Optional, Sequence, Tuple

import gradio as gr
import numpy as np

from config import BUNDLED_LUT_DIR, PreviewConfig
from core.processor import (
    ProcessResult,
    WelutProcessor,
    generate_lut_preview,
    generate_preview,
    generate_thumbnail,
    process_batch,
)
from utils import LUTManager

HEADER_CSS = """
.preview-box img {
    max-width: 100%;
    max-height: 560px;
    object-fit: contain;
}
.preview-empty {
    color: #888;
    padding: 40px 0;
    text-align: center;
}
"""


def _preview_html(data_uri, empty_text):
    """Wrap a data URI in an <img>; no URI means no preview available."""
    if not data_uri:
        return f'<div class="preview-empty">{html.escape(empty_text)}</div>'
    return f'<img src="{data_uri}" alt="preview"/>'


def _placeholder_thumbnail(size: int = PreviewConfig.THUMBNAIL_SIZE) -> np.ndarray:
    return np.full((size, size, 3), 60, dtype=np.uint8)


# ========== File list ==========

def add_files(files: Sequence[str], new_paths: Optional[Sequence[str]]) -> List[str]:
    """Append new paths, skipping ones already listed; order is kept."""
    merged = list(files)
    for path in new_paths or []:
        if path and path not in merged:
            merged.append(path)
    return merged


def remove_file(files: Sequence[str], path: str, active: Optional[str]) -> Tuple[List[str], Optional[str]]:
    """
    Drop `path` from the list.

    When the active file is removed, the file that slides into its slot
    becomes active (the new last file if it was the last one).

    Returns:
        (remaining files, active file or None)
    """
    remaining = [f for f in files if f != path]
    if active != path:
        return remaining, active
    if not remaining:
        return remaining, None
    index = list(files).index(path)
    return remaining, remaining[min(index, len(remaining) - 1)]


def format_batch_status(files: Sequence[str], results: Sequence[ProcessResult]) -> str:
    """Markdown status: one line per file and an 'N / M Completed' footer."""
    lines = []
    for path, result in zip(files, results):
        if result.success:
            lines.append(f"- ✅ Saved to {result.output_path}")
        else:
            lines.append(f"- ❌ Error ({os.path.basename(path)}): {result.error}")
    completed = sum(1 for r in results if r.success)
    lines.append("")
    lines.append(f"**{completed} / {len(files)} Completed**")
    return "\n".join(lines)


def _gallery_items(files: Sequence[str], thumbnails: Dict[str, Optional[np.ndarray]]):
    items = []
    for path in files:
        thumb = thumbnails.get(path)
        items.append((thumb if thumb is not None else _placeholder_thumbnail(), os.path.basename(path)))
    return items


def _selected_lut_path(manager: LUTManager, lut_name):
    return manager.get_lut_path(lut_name) if lut_name else None


def create_app(manager: LUTManager, processor: WelutProcessor):
    """
    Build the Gradio Blocks app.

    Args:
        manager: LUT library
        processor: Image processor shared by all callbacks

    Returns:
        gr.Blocks
    """

    def previews_for(active, lut_name):
        if not active:
            return _preview_html(None, "No image selected"), _preview_html(None, "")
        original = generate_preview(processor, active, PreviewConfig.DEFAULT_WIDTH)
        lut_path = _selected_lut_path(manager, lut_name)
        lut_view = generate_lut_preview(processor, active, lut_path) if lut_path else None
        return (_preview_html(original, "Preview not available"),
                _preview_html(lut_view, "Select a LUT" if not lut_path else "Preview not available"))

    def on_files_added(new_paths, files, active, thumbnails, lut_name):
        merged = add_files(files, new_paths)
        thumbnails = dict(thumbnails)
        for path in merged:
            if path not in thumbnails:
                thumbnails[path] = generate_thumbnail(processor, path, PreviewConfig.THUMBNAIL_SIZE)
        if active is None and len(merged) > len(files):
            active = merged[len(files)]
        original, lut_view = previews_for(active, lut_name)
        return merged, active, thumbnails, _gallery_items(merged, thumbnails), original, lut_view, None

    def on_thumbnail_select(files, lut_name, evt: gr.SelectData):
        if evt.index is None or evt.index >= len(files):
            return gr.update(), gr.update(), gr.update()
        active = files[evt.index]
        original, lut_view = previews_for(active, lut_name)
        return active, original, lut_view

    def on_remove_active(files, active, thumbnails, lut_name):
        if not active:
            return files, active, thumbnails, gr.update(), gr.update(), gr.update()
        remaining, active = remove_file(files, active, active)
        thumbnails = {path: thumb for path, thumb in thumbnails.items() if path in remaining}
        original, lut_view = previews_for(active, lut_name)
        return remaining, active, thumbnails, _gallery_items(remaining, thumbnails), original, lut_view

    def on_lut_select(active, lut_name):
        lut_path = _selected_lut_path(manager, lut_name)
        if not active or not lut_path:
            return _preview_html(None, "Select an image and a LUT")
        return _preview_html(generate_lut_preview(processor, active, lut_path), "Preview not available")

    def on_lut_import(lut_file):
        try:
            item = manager.import_lut(lut_file)
        except ValueError as e:
            return gr.update(choices=manager.get_lut_choices()), f"❌ {e}"
        if item is None:
            return gr.update(choices=manager.get_lut_choices()), ""
        return gr.update(choices=manager.get_lut_choices(), value=item.name), f"✅ LUT imported: {item.name}"

    def on_lut_delete(lut_name):
        item = next((lut for lut in manager.list_luts() if lut.name == lut_name), None)
        if item is None or not manager.delete_lut(item.id):
            return gr.update(choices=manager.get_lut_choices()), "❌ LUT not found"
        return gr.update(choices=manager.get_lut_choices(), value=None), f"✅ Deleted: {lut_name}"

    def on_process(files, lut_name, progress=gr.Progress()):
        lut_path = _selected_lut_path(manager, lut_name)
        if not files or not lut_path:
            return "❌ Select images and a LUT first"

        def report(index, total, path):
            progress(index / total, desc=f"Processing {os.path.basename(path)}...")

        results = process_batch(processor, files, lut_path, progress=report)
        return format_batch_status(files, results)

    with gr.Blocks(title="Welut", css=HEADER_CSS) as app:
        gr.Markdown("# Welut\nApply PNG color LUTs to photos, including camera RAW files.")

        files_state = gr.State([])
        active_state = gr.State(None)
        thumbnails_state = gr.State({})

        with gr.Row():
            with gr.Column(scale=1, min_width=320):
                image_input = gr.File(label="Add images", file_count="multiple", type="filepath")
                lut_dropdown = gr.Dropdown(
                    choices=manager.get_lut_choices(),
                    label="LUT",
                    value=None,
                    interactive=True,
                )
                with gr.Row():
                    lut_upload = gr.File(label="Import LUT (.png)", type="filepath", file_types=['.png'])
                    delete_btn = gr.Button("🗑️ Delete LUT")
                lut_status = gr.Markdown("")
                process_btn = gr.Button("Apply LUT to all", variant="primary")
                process_status = gr.Markdown("")

            with gr.Column(scale=2):
                with gr.Row():
                    original_view = gr.HTML(_preview_html(None, "No image selected"), elem_classes=["preview-box"])
                    lut_view = gr.HTML(_preview_html(None, ""), elem_classes=["preview-box"])
                gallery = gr.Gallery(
                    label="Images",
                    columns=6,
                    height=200,
                    allow_preview=False,
                    interactive=False,
                )
                remove_btn = gr.Button("✖ Remove selected image")

        image_input.upload(
            on_files_added,
            inputs=[image_input, files_state, active_state, thumbnails_state, lut_dropdown],
            outputs=[files_state, active_state, thumbnails_state, gallery, original_view, lut_view, image_input],
        )
        gallery.select(
            on_thumbnail_select,
            inputs=[files_state, lut_dropdown],
            outputs=[active_state, original_view, lut_view],
        )
        remove_btn.click(
            on_remove_active,
            inputs=[files_state, active_state, thumbnails_state, lut_dropdown],
            outputs=[files_state, active_state, thumbnails_state, gallery, original_view, lut_view],
        )
        lut_dropdown.change(on_lut_select, inputs=[active_state, lut_dropdown], outputs=[lut_view])
        lut_upload.upload(on_lut_import, inputs=[lut_upload], outputs=[lut_dropdown, lut_status])
        delete_btn.click(on_lut_delete, inputs=[lut_dropdown], outputs=[lut_dropdown, lut_status])
        process_btn.click(on_process, inputs=[files_state, lut_dropdown], outputs=[process_status])

    return app


def build_default_app(library_dir: str) -> "gr.Blocks":
    """Library at `library_dir` (bundled LUTs synced in) and a host-platform processor."""
    manager = LUTManager(library_dir)
    manager.sync_default_luts(BUNDLED_LUT_DIR)
    return create_app(manager, WelutProcessor())
