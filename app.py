"""Streamlit UI for generating reveal.js decks from parsed deck documents."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import streamlit as st

from slidedeck_ml.deck_generation import DeckGenerator, GeneratedDeck
from slidedeck_ml.deck_library import DocumentLibrary
from slidedeck_ml.deck_models import (
    CodeBlock,
    Document,
    Presentation,
    VisualHighlight,
    document_from_dict,
    walk_contents,
)
from slidedeck_ml.exceptions import DeckError
from slidedeck_ml.markup_generator import legend_image_steps
from slidedeck_ml.media_assets import AssetCopier
from slidedeck_ml.runtime_generator import legend_image_for_step
from slidedeck_ml.settings import DeckSettings

_MIME_TYPES = {
    ".html": "text/html",
    ".css": "text/css",
    ".ts": "text/plain",
}


def _load_document_from_upload(upload) -> Optional[Document]:
    if upload is None:
        return None
    data = json.load(upload)
    return document_from_dict(data)


def _mime_type(filename: str) -> str:
    return _MIME_TYPES.get(Path(filename).suffix, "text/plain")


def _presentation_label(key: str, presentation: Presentation) -> str:
    return f"{presentation.name} ({key})"


def _visual_code_blocks(presentation: Presentation) -> List[Tuple[int, CodeBlock]]:
    """Return ``(slide number, block)`` for every code block with legend images."""

    blocks: List[Tuple[int, CodeBlock]] = []
    for number, slide in enumerate(presentation.slides, start=1):
        for content, _ in walk_contents(slide.contents):
            if isinstance(content, CodeBlock) and isinstance(content.highlight, VisualHighlight):
                blocks.append((number, content))
    return blocks


def _issue_summary(deck: GeneratedDeck) -> Dict[str, int]:
    summary: Dict[str, int] = {}
    for issue in deck.issues or []:
        summary[issue.severity] = summary.get(issue.severity, 0) + 1
    return summary


def _session_library(shared: DocumentLibrary, uploaded: Dict[str, dict]) -> DocumentLibrary:
    """Copy the cached workspace library and add this session's uploads to the copy."""

    library = DocumentLibrary(shared.root, autoload=False)
    for key, document in shared.items():
        library.register(key, document)
    for name, payload in uploaded.items():
        library.register(name, document_from_dict(payload))
    return library


@st.cache_resource(show_spinner=False)
def load_resources(source_dir: Path) -> DocumentLibrary:
    """Load every parsed document below ``source_dir``."""

    return DocumentLibrary(source_dir)


def _render_legend_preview(presentation: Presentation) -> None:
    blocks = _visual_code_blocks(presentation)
    if not blocks:
        return

    st.markdown("#### Code highlight legends")
    for idx, (slide_number, block) in enumerate(blocks):
        image_steps = legend_image_steps(block.highlight)
        if not image_steps:
            st.caption(f"Slide {slide_number}: no legend images declared")
            continue
        visible = st.slider(
            f"Slide {slide_number}: visible highlight steps",
            min_value=0,
            max_value=len(image_steps),
            value=0,
            key=f"legend_step_{idx}",
        )
        legend = legend_image_for_step(image_steps, visible)
        st.caption(f"Legend shown: {legend or 'none'}")


def main() -> None:
    st.set_page_config(page_title="SlideDeck ML", layout="wide")
    st.title("SlideDeck ML")

    settings = DeckSettings.from_env()
    st.session_state.setdefault("uploaded_documents", {})

    with st.sidebar:
        st.header("Workspace")
        source_dir = Path(st.text_input("Document folder", value=str(settings.source_dir)))
        output_dir = Path(st.text_input("Output folder", value=str(settings.output_dir)))
        assets_dir = Path(
            st.text_input("Assets folder", value=str(settings.assets_dir))
        )

        uploads = st.file_uploader(
            "Add parsed documents (.json)", type="json", accept_multiple_files=True
        )
        for upload in uploads or []:
            try:
                document = _load_document_from_upload(upload)
            except (DeckError, json.JSONDecodeError) as exc:
                st.error(f"{upload.name}: {exc}")
                continue
            st.session_state["uploaded_documents"][upload.name] = document.to_dict()

    try:
        shared_library = load_resources(source_dir)
    except DeckError as exc:
        st.error("Documents could not be loaded from the workspace.")
        st.exception(exc)
        return

    library = _session_library(shared_library, st.session_state["uploaded_documents"])

    presentations = library.presentations()
    if not presentations:
        st.info(f"No presentations found in {source_dir}. Upload a parsed presentation to begin.")
        return

    with st.sidebar:
        with st.expander("Templates", expanded=False):
            templates = library.templates()
            if not templates:
                st.write("No templates loaded.")
            for key, template in sorted(templates.items()):
                st.markdown(f"- **{template.name}**: `{key}`")

    keys = sorted(presentations)
    selected = st.selectbox(
        "Presentation",
        keys,
        format_func=lambda key: _presentation_label(key, presentations[key]),
    )
    presentation = presentations[selected]
    st.markdown(
        f"**Slides**: {len(presentation.slides)} &nbsp; "
        f"**Template import**: "
        f"`{presentation.template_import.path if presentation.template_import else 'none'}`"
    )

    copy_assets = st.checkbox("Copy relative media into the output folder", value=False)
    save_to_disk = st.checkbox(f"Write artifacts to {output_dir}", value=False)
    if not st.button("Generate deck", type="primary"):
        _render_legend_preview(presentation)
        return

    copier = AssetCopier(assets_dir, output_dir / "assets") if copy_assets else None
    generator = DeckGenerator(library.find_document_by_import_path, asset_copier=copier)
    try:
        deck = generator.generate(presentation)
    except DeckError as exc:
        st.error("Deck generation failed.")
        st.exception(exc)
        return

    summary = _issue_summary(deck)
    if summary:
        st.warning(
            "Binding issues: "
            + ", ".join(f"{count} {severity}" for severity, count in sorted(summary.items()))
        )
        for issue in deck.issues or []:
            st.markdown(f"- **{issue.severity}**: {issue.message}")
    else:
        st.success("All placeholders resolved.")

    artifacts = deck.artifacts()
    tabs = st.tabs(list(artifacts))
    for tab, (filename, text) in zip(tabs, artifacts.items()):
        with tab:
            language = {"html": "html", "css": "css", "ts": "typescript"}.get(
                Path(filename).suffix.lstrip("."), "text"
            )
            st.code(text, language=language)
            st.download_button(
                f"Download {filename}",
                data=text.encode("utf-8"),
                file_name=filename,
                mime=_mime_type(filename),
                key=f"download_{filename}",
            )

    _render_legend_preview(presentation)

    if save_to_disk:
        written = deck.write(output_dir)
        st.success("Saved " + ", ".join(str(path) for path in written))

    st.caption("Documents are re-read when the workspace folder changes.")


if __name__ == "__main__":  # pragma: no cover - Streamlit handles execution
    main()
