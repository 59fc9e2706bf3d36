"""
3D marker overlay.

Bridges the map's per-frame camera transform to the scene renderer so the
marker model stays anchored to the geocoded coordinate while the camera moves.
All state lives in the session's ``SceneState``; the hooks only run on the
event loop thread, so no locking is needed.
"""

from loguru import logger

from pinmap.config import MarkerSettings
from pinmap.gl import GLContext
from pinmap.maps.host import CoordinateTransformer, OverlayHooks
from pinmap.scene.graph import (
    AmbientLight,
    DirectionalLight,
    Group,
    PerspectiveCamera,
    Scene,
    dispose_tree,
)
from pinmap.scene.loader import GLTFLoader, LoadProgress
from pinmap.scene.renderer import ShadowMapType, WebGLRenderer
from pinmap.session import AnimationToken, SessionState

AMBIENT_COLOR = 0xFFFFFF
AMBIENT_INTENSITY = 0.75
SUN_COLOR = 0xFFFFFF
SUN_INTENSITY = 0.5
SUN_POSITION = (0.5, -1.0, 0.5)


class MarkerOverlay(OverlayHooks):
    def __init__(self, session: SessionState, settings: MarkerSettings, loader: GLTFLoader):
        self.session = session
        self.settings = settings
        self.loader = loader

    @property
    def scene_state(self):
        return self.session.scene

    def on_add(self) -> None:
        logger.info("Overlay added")
        state = self.scene_state

        state.scene = Scene()
        state.camera = PerspectiveCamera()

        ambient = AmbientLight(AMBIENT_COLOR, AMBIENT_INTENSITY)
        state.scene.add(ambient)

        sun = DirectionalLight(SUN_COLOR, SUN_INTENSITY)
        sun.position.set(*SUN_POSITION)
        sun.cast_shadow = True
        state.scene.add(sun)

        state.load_task = self.loader.load(
            self.settings.url,
            self._on_model_loaded,
            self._on_model_progress,
            self._on_model_error,
        )

    def _on_model_loaded(self, model: Group) -> None:
        state = self.scene_state
        state.load_task = None

        if state.scene is None:
            # Overlay was removed while the model was loading
            dispose_tree(model)
            return

        logger.info(f"Marker model loaded ({len(model.children)} meshes)")
        model.scale.set(self.settings.scale, self.settings.scale, self.settings.scale)
        model.rotation.x = self.settings.rotation_x
        model.rotation.z = self.settings.rotation_z

        if state.renderer is None:
            state.pending_model = model
            return
        self._insert_model(model)

    def _on_model_progress(self, progress: LoadProgress) -> None:
        logger.debug(f"Loading progress: {progress.percent:.0f}%")

    def _on_model_error(self, error: BaseException) -> None:
        self.scene_state.load_task = None
        logger.error(f"Error loading marker model {self.settings.url}: {error}")

    def _insert_model(self, model: Group) -> None:
        state = self.scene_state
        state.model = model
        state.pending_model = None
        state.scene.add(model)

    def on_context_restored(self, gl: GLContext) -> None:
        logger.info("Overlay GL context restored")
        state = self.scene_state

        attributes = {**gl.get_context_attributes(), "alpha": True, "antialias": True}
        renderer = WebGLRenderer(canvas=gl.canvas, context=gl, **attributes)
        # The map clears the shared framebuffer itself
        renderer.auto_clear = False
        renderer.shadow_map.enabled = True
        renderer.shadow_map.type = ShadowMapType.PCF_SOFT
        state.renderer = renderer

        if state.pending_model is not None and state.scene is not None:
            self._insert_model(state.pending_model)

        self._start_animation()

    def _start_animation(self) -> None:
        session = self.session
        if session.animation is not None:
            session.animation.cancel(session.library)
        token = AnimationToken()
        session.animation = token

        def animate():
            if token.cancelled:
                return
            token.handle = session.library.request_animation_frame(animate)
            token.frames += 1

            model = session.scene.model
            if model is not None:
                model.rotation.y += self.settings.spin_step

            if session.overlay_view is not None:
                session.overlay_view.request_redraw()

        animate()

    def on_draw(self, gl: GLContext, transformer: CoordinateTransformer) -> None:
        state = self.scene_state
        target = self.session.target
        if not state.ready or target is None:
            return

        matrix = transformer.from_lat_lng_altitude(
            target.latitude,
            target.longitude,
            self.settings.altitude,
        )
        state.camera.set_projection_from_array(matrix)
        state.renderer.render(state.scene, state.camera)
        state.renderer.reset_state()

    def on_remove(self) -> None:
        logger.info("Overlay removed")
        session = self.session
        state = self.scene_state

        if session.animation is not None:
            session.animation.cancel(session.library)

        if state.load_task is not None and not state.load_task.done():
            state.load_task.cancel()

        if state.scene is not None:
            dispose_tree(state.scene)
        if state.pending_model is not None:
            dispose_tree(state.pending_model)
        if state.renderer is not None:
            state.renderer.dispose()

        state.clear()
