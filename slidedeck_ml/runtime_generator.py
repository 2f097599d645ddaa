"""Render the viewer behavior script (reveal.js initialization and plugins)."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .deck_models import (
    OPTION_LIVE_ANNOTATIONS,
    OPTION_PROGRESS_BAR,
    OPTION_SLIDE_NUMBERS,
    CodeBlock,
    MathBlock,
    Model3D,
    Presentation,
    Template,
    walk_contents,
)
from .reference_resolver import ReferenceResolver

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PluginConfig:
    name: str
    import_path: str
    css: Tuple[str, ...] = ()
    default_export: bool = True
    plugin_expr: Optional[str] = None

    @property
    def expression(self) -> str:
        return self.plugin_expr or self.name


AVAILABLE_PLUGINS: Dict[str, PluginConfig] = {
    "highlight": PluginConfig(
        name="RevealHighlight",
        import_path="reveal.js/plugin/highlight/highlight.js",
        css=("reveal.js/plugin/highlight/monokai.css",),
    ),
    "math": PluginConfig(
        name="RevealMath",
        import_path="reveal.js/plugin/math/math.js",
        plugin_expr="RevealMath.KaTeX",
    ),
}

MODEL_VIEWER_IMPORT = "@google/model-viewer"

KATEX_CONFIG = r"""katex: {
      version: "latest",
      delimiters: [
        { left: "$$", right: "$$", display: true },
        { left: "$", right: "$", display: false },
        { left: "\\(", right: "\\)", display: false },
        { left: "\\[", right: "\\]", display: true },
      ],
      ignoredTags: ["script", "noscript", "style", "textarea", "pre", "code"],
    },"""


@dataclass(slots=True)
class RuntimeFeatures:
    """Viewer capabilities required by a presentation."""

    has_code: bool = False
    has_math: bool = False
    has_model3d: bool = False
    slide_number: bool = False
    progress: bool = False
    live_annotations: bool = False
    plugins: List[PluginConfig] = field(default_factory=list)

    @property
    def content_scan_complete(self) -> bool:
        return self.has_code and self.has_math and self.has_model3d


def analyze_presentation(
    presentation: Presentation, template: Optional[Template] = None
) -> RuntimeFeatures:
    """Scan options and content once to decide which features to enable."""

    features = RuntimeFeatures()
    _apply_options(features, presentation.options)
    if template is not None:
        _apply_options(features, template.options)

    for slide in presentation.slides:
        for content, _ in walk_contents(slide.contents):
            if isinstance(content, CodeBlock):
                features.has_code = True
            elif isinstance(content, MathBlock):
                features.has_math = True
            elif isinstance(content, Model3D):
                features.has_model3d = True
            if features.content_scan_complete:
                break
        if features.content_scan_complete:
            break

    if features.has_code:
        features.plugins.append(AVAILABLE_PLUGINS["highlight"])
    if features.has_math:
        features.plugins.append(AVAILABLE_PLUGINS["math"])
    return features


def _apply_options(features: RuntimeFeatures, options: Iterable[str]) -> None:
    for option in options:
        if option == OPTION_SLIDE_NUMBERS:
            features.slide_number = True
        elif option == OPTION_PROGRESS_BAR:
            features.progress = True
        elif option == OPTION_LIVE_ANNOTATIONS:
            features.live_annotations = True


def legend_image_index(visible_fragments: int, image_count: int) -> int:
    """Index of the legend image shown after ``visible_fragments`` steps."""

    return max(0, min(visible_fragments, image_count - 1))


def legend_image_for_step(image_steps: Sequence[str], visible_fragments: int) -> Optional[str]:
    if not image_steps:
        return None
    return image_steps[legend_image_index(visible_fragments, len(image_steps))]


def plugin_imports(plugins: Sequence[PluginConfig]) -> List[str]:
    lines: List[str] = []
    for plugin in plugins:
        lines.extend(f'import "{css}";' for css in plugin.css)
        if plugin.default_export:
            lines.append(f'import {plugin.name} from "{plugin.import_path}";')
        else:
            lines.append(f'import "{plugin.import_path}";')
    return lines


class RuntimeGenerator:
    """Emit the module loaded by the generated markup."""

    def __init__(self, resolver: Optional[ReferenceResolver] = None) -> None:
        self.resolver = resolver

    def generate(self, presentation: Presentation) -> str:
        template = self.resolver.resolve_template() if self.resolver else None
        features = analyze_presentation(presentation, template)
        LOGGER.debug("Runtime features for '%s': %s", presentation.name, features)

        lines = [
            'import Reveal from "reveal.js";',
            'import "reveal.js/dist/reveal.css";',
            'import "reveal.js/dist/theme/white.css";',
        ]
        if features.has_model3d:
            lines.append(f'import "{MODEL_VIEWER_IMPORT}";')
        lines.extend(plugin_imports(features.plugins))
        lines.append("")
        lines.append(self._initialize(features))
        if features.has_code:
            lines.append(CODE_STEP_SYNC_LISTENER)
        if features.live_annotations:
            lines.append(LIVE_ANNOTATION_RUNTIME)
        return "\n".join(lines) + "\n"

    def _initialize(self, features: RuntimeFeatures) -> str:
        options = [
            "hash: true,",
            f"slideNumber: {_js_bool(features.slide_number)},",
            f"progress: {_js_bool(features.progress)},",
            'width: "100%",',
            'height: "100%",',
            "disableLayout: true,",
            'display: "flex",',
        ]
        if features.has_math:
            options.append(KATEX_CONFIG)
        if features.plugins:
            names = ", ".join(plugin.expression for plugin in features.plugins)
            options.append(f"plugins: [{names}],")
        body = "\n".join(f"    {option}" for option in options)
        return f"Reveal.initialize({{\n{body}\n}});"


def _js_bool(value: bool) -> str:
    return "true" if value else "false"


CODE_STEP_SYNC_LISTENER = """
// Keep each code block's legend image in step with its highlight fragments.
function syncLegendImages() {
    const slide = Reveal.getCurrentSlide();
    if (!slide) return;

    for (const pre of Array.from(slide.querySelectorAll("pre"))) {
        const code = pre.querySelector("code[data-image-steps]");
        if (!code) continue;

        const steps = code.getAttribute("data-image-steps");
        const target = code.getAttribute("data-target");
        if (!steps || !target) continue;

        const images = steps.split("|");
        const visibleFragments = pre.querySelectorAll(".fragment.visible").length;
        const index = Math.max(0, Math.min(visibleFragments, images.length - 1));
        const nextSrc = images[index];

        const legend = (slide.querySelector(target) ?? document.querySelector(target)) as HTMLImageElement | null;
        if (legend && legend.getAttribute("src") !== nextSrc) {
            legend.setAttribute("src", nextSrc);
        }
    }
}

Reveal.on("ready", syncLegendImages);
Reveal.on("slidechanged", syncLegendImages);
Reveal.on("fragmentshown", syncLegendImages);
Reveal.on("fragmenthidden", syncLegendImages);
"""


LIVE_ANNOTATION_RUNTIME = """
// Live slide annotations. Press D to show the toolbar and start drawing.
(function () {
  type Point = { x: number; y: number };
  type Tool = "off" | "pen" | "highlighter" | "eraser";
  type Stroke = { points: Point[]; color: string; width: number; alpha: number; erase: boolean };

  const STORAGE_KEY = "slidedeckml:live-anno-steps:v1";
  const COLORS = ["#ff2d2d", "#2d7dff", "#2dff7a", "#ffd52d", "#000000"];
  const WIDTHS = { pen: 4, highlighter: 22, eraser: 18 };

  let tool: Tool = "off";
  let lastTool: Exclude<Tool, "off"> = "pen";
  let color = COLORS[0];
  let current: Stroke | null = null;
  const layers = new Map<string, Stroke[]>();

  const root = document.querySelector(".reveal");
  if (!root) return;

  const canvas = document.createElement("canvas");
  canvas.style.cssText = "position:fixed;inset:0;z-index:9999;pointer-events:none";
  root.appendChild(canvas);
  const ctx = canvas.getContext("2d");
  if (!ctx) return;

  const notify = (message: string) => {
    const el = document.createElement("div");
    el.textContent = message;
    el.style.cssText =
      "position:fixed;top:12px;left:12px;z-index:10001;padding:6px 10px;" +
      "background:rgba(0,0,0,.6);color:#fff;border-radius:8px;font:12px system-ui";
    document.body.appendChild(el);
    setTimeout(() => el.remove(), 700);
  };

  // One layer per slide (h.v) and number of visible fragments.
  const layerKey = () => {
    const indices = Reveal.getIndices();
    const slide = Reveal.getCurrentSlide();
    const step = slide ? slide.querySelectorAll(".fragment.visible").length : 0;
    return `${indices.h ?? 0}.${indices.v ?? 0}:${step}`;
  };

  const layer = () => {
    const key = layerKey();
    if (!layers.has(key)) layers.set(key, []);
    return layers.get(key) as Stroke[];
  };

  const redraw = () => {
    ctx.clearRect(0, 0, canvas.width, canvas.height);
    ctx.lineCap = "round";
    ctx.lineJoin = "round";
    for (const stroke of layer()) {
      if (stroke.points.length < 2) continue;
      ctx.save();
      ctx.globalCompositeOperation = stroke.erase ? "destination-out" : "source-over";
      ctx.globalAlpha = stroke.alpha;
      ctx.strokeStyle = stroke.color;
      ctx.lineWidth = stroke.width;
      ctx.beginPath();
      ctx.moveTo(stroke.points[0].x, stroke.points[0].y);
      for (const point of stroke.points.slice(1)) ctx.lineTo(point.x, point.y);
      ctx.stroke();
      ctx.restore();
    }
  };

  const resize = () => {
    canvas.width = innerWidth;
    canvas.height = innerHeight;
    redraw();
  };

  const readStore = (): Record<string, Stroke[]> => {
    try {
      return JSON.parse(localStorage.getItem(STORAGE_KEY) || "{}");
    } catch {
      return {};
    }
  };

  const save = () => {
    const stored = readStore();
    stored[layerKey()] = layer();
    localStorage.setItem(STORAGE_KEY, JSON.stringify(stored));
    notify("Saved");
  };

  const load = () => {
    const stored = readStore();
    const key = layerKey();
    layers.set(key, stored[key] || []);
    redraw();
    notify(stored[key] ? "Loaded" : "No saved data");
  };

  const clearLayer = () => {
    layers.set(layerKey(), []);
    redraw();
    notify("Cleared");
  };

  // ----- Toolbar -----
  const buttonCss =
    "padding:6px 8px;border-radius:10px;border:1px solid rgba(255,255,255,.18);" +
    "background:rgba(255,255,255,.10);color:#fff;cursor:pointer";
  const activeCss = ";background:rgba(255,255,255,.22);border-color:rgba(255,255,255,.35)";

  const menu = document.createElement("div");
  menu.style.cssText =
    "position:fixed;left:12px;bottom:12px;z-index:10003;padding:10px 12px;" +
    "border-radius:12px;background:rgba(0,0,0,.60);color:#fff;font:12px system-ui;" +
    "user-select:none;display:none;min-width:260px";
  menu.innerHTML =
    '<div style="display:flex;justify-content:space-between;margin-bottom:8px">' +
    '<strong>Slide annotations</strong><span data-anno="state">OFF</span></div>' +
    '<div style="display:flex;gap:8px;margin-bottom:10px">' +
    '<button data-tool="pen">Pen</button>' +
    '<button data-tool="highlighter">Highlighter</button>' +
    '<button data-tool="eraser">Eraser</button></div>' +
    '<div data-anno="colors" style="display:flex;gap:6px;margin-bottom:10px"></div>' +
    '<div style="display:flex;gap:8px">' +
    '<button data-action="clear">Clear step</button>' +
    '<button data-action="save">Save</button>' +
    '<button data-action="load">Load</button></div>';
  document.body.appendChild(menu);

  const toolButtons = Array.from(menu.querySelectorAll<HTMLButtonElement>("button[data-tool]"));
  const stateLabel = menu.querySelector<HTMLElement>('[data-anno="state"]');

  const render = () => {
    if (stateLabel) stateLabel.textContent = tool.toUpperCase();
    for (const button of toolButtons) {
      button.style.cssText = buttonCss + (button.dataset.tool === tool ? activeCss : "");
    }
    for (const button of Array.from(menu.querySelectorAll<HTMLButtonElement>("button[data-action]"))) {
      button.style.cssText = buttonCss;
    }
  };

  const setTool = (next: Tool) => {
    tool = next;
    if (next !== "off") lastTool = next;
    canvas.style.pointerEvents = next === "off" ? "none" : "auto";
    render();
  };

  const colors = menu.querySelector<HTMLElement>('[data-anno="colors"]');
  for (const swatch of COLORS) {
    const dot = document.createElement("button");
    dot.type = "button";
    dot.title = swatch;
    dot.style.cssText =
      "width:16px;height:16px;border-radius:999px;border:1px solid rgba(255,255,255,.6);" +
      "cursor:pointer;padding:0;background:" + swatch;
    dot.addEventListener("click", () => { color = swatch; });
    colors?.appendChild(dot);
  }

  for (const button of toolButtons) {
    button.addEventListener("click", () => setTool(button.dataset.tool as Tool));
  }
  menu.querySelector('[data-action="clear"]')?.addEventListener("click", clearLayer);
  menu.querySelector('[data-action="save"]')?.addEventListener("click", save);
  menu.querySelector('[data-action="load"]')?.addEventListener("click", load);
  menu.addEventListener("pointerdown", (e) => e.stopPropagation());
  menu.addEventListener("click", (e) => e.stopPropagation());

  // ----- Drawing -----
  canvas.addEventListener("pointerdown", (e: PointerEvent) => {
    if (tool === "off") return;
    current = {
      points: [{ x: e.clientX, y: e.clientY }],
      color: tool === "eraser" ? "#000" : color,
      width: WIDTHS[tool],
      alpha: tool === "highlighter" ? 0.25 : 1,
      erase: tool === "eraser",
    };
    layer().push(current);
    canvas.setPointerCapture?.(e.pointerId);
  });

  canvas.addEventListener("pointermove", (e: PointerEvent) => {
    if (tool === "off" || !current) return;
    current.points.push({ x: e.clientX, y: e.clientY });
    redraw();
  });

  addEventListener("pointerup", () => { current = null; });

  addEventListener("keydown", (e: KeyboardEvent) => {
    if (e.key !== "d" && e.key !== "D") return;
    e.preventDefault();
    e.stopPropagation();
    const show = menu.style.display === "none";
    menu.style.display = show ? "block" : "none";
    setTool(show ? lastTool : "off");
  }, true);

  const onStepChange = () => {
    current = null;
    redraw();
  };
  Reveal.on("slidechanged", onStepChange);
  Reveal.on("fragmentshown", onStepChange);
  Reveal.on("fragmenthidden", onStepChange);

  addEventListener("resize", resize);
  render();
  resize();
})();
"""
