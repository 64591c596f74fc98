"""NiceGUI page: document upload, file selection and chat."""

import os
from functools import partial

from nicegui import app, events, ui

from docchat.client import ApiClient
from docchat.config import MAX_UPLOAD_SIZE
from docchat.errors import GatewayError
from docchat.models.schemas import DocumentReference, Role, TranscriptEntry
from docchat.session import CyclePhase, QuestionFlow, SessionState
from docchat.session.formatting import markdown_to_html

CUSTOM_CSS = """
<link href="https://fonts.googleapis.com/css2?family=Inter:wght@400;500;600&display=swap"
      rel="stylesheet">
<link href="https://fonts.googleapis.com/icon?family=Material+Icons" rel="stylesheet">
<style>
    * { font-family: 'Inter', sans-serif; }

    body { background: #f3f4f6; min-height: 100vh; }

    .card {
        background: white;
        border-radius: 12px;
        box-shadow: 0 2px 8px rgba(0, 0, 0, 0.1);
    }

    .header { background: linear-gradient(135deg, #3b82f6 0%, #6366f1 100%); }

    .message-user {
        background: #eff6ff;
        color: #1f2937;
        border-radius: 18px 18px 4px 18px;
    }

    .message-assistant {
        background: #f3f4f6;
        color: #1f2937;
        border-radius: 18px 18px 18px 4px;
    }

    .message-system-error {
        background: #fef2f2;
        color: #991b1b;
        border-radius: 12px;
    }

    .avatar-user { background: #3b82f6; }
    .avatar-assistant { background: #6b7280; }
    .avatar-system-error { background: #ef4444; }

    .file-item { border: 1px solid #e5e7eb; border-radius: 8px; cursor: pointer; }
    .file-item:hover { box-shadow: 0 2px 6px rgba(0, 0, 0, 0.08); }
    .file-selected { border-color: #3b82f6; background: #eff6ff; }
    .file-duplicate { border-color: #fcd34d; }

    .typing-dot {
        width: 8px; height: 8px;
        background: #3b82f6;
        border-radius: 50%;
        animation: bounce 1.4s infinite ease-in-out;
    }
    .typing-dot:nth-child(2) { animation-delay: 0.2s; }
    .typing-dot:nth-child(3) { animation-delay: 0.4s; }

    @keyframes bounce {
        0%, 60%, 100% { transform: translateY(0); }
        30% { transform: translateY(-6px); }
    }

    /* Markdown styling */
    .message-assistant strong { font-weight: 600; }
    .message-assistant em { font-style: italic; }
    .message-assistant pre { margin: 0.5rem 0; }
    .message-assistant code { font-family: 'Menlo', 'Monaco', monospace; }
    .message-assistant ul, .message-assistant ol { margin: 0.5rem 0; }
    .message-assistant a { color: #4f46e5; }
</style>
"""

ROLE_STYLE = {
    Role.USER: ("message-user", "avatar-user", "person", "You"),
    Role.ASSISTANT: ("message-assistant", "avatar-assistant", "smart_toy", "Assistant"),
    Role.SYSTEM_ERROR: ("message-system-error", "avatar-system-error", "warning", "System"),
}

STATUS_MESSAGES = {
    CyclePhase.SEARCHING: "Searching documents...",
    CyclePhase.GENERATING: "Generating response...",
}


# Shared by all pages; closed on shutdown
_api_client: ApiClient | None = None


def get_api_client() -> ApiClient:
    global _api_client
    if _api_client is None:
        _api_client = ApiClient()
    return _api_client


async def close_api_client() -> None:
    global _api_client
    if _api_client is not None:
        await _api_client.aclose()
        _api_client = None


app.on_shutdown(close_api_client)


@ui.page("/")
def chat_page() -> None:
    """Main page."""
    ui.add_head_html(CUSTOM_CSS)
    state = SessionState()
    api = get_api_client()

    files_container: ui.column
    load_more_btn: ui.button
    messages_container: ui.column
    status_row: ui.row
    status_label: ui.label
    selection_label: ui.label
    input_field: ui.input
    send_btn: ui.button

    # === Files ===

    def toggle_file(file_id: str) -> None:
        state.selection.toggle(file_id)
        refresh_files()
        update_controls()

    def render_file(ref: DocumentReference) -> None:
        selected = ref.file_id in state.selection
        duplicate = state.catalog.is_duplicate_name(ref.file_name)
        css = "file-selected" if selected else "file-duplicate" if duplicate else ""

        with (
            ui.row()
            .classes(f"w-full file-item {css} p-3 items-center justify-between")
            .on("click", partial(toggle_file, ref.file_id))
        ):
            with ui.column().classes("gap-0"):
                with ui.row().classes("items-center gap-2"):
                    ui.label(state.catalog.label(ref)).classes("font-medium")
                    if duplicate:
                        ui.badge("Duplicate", color="amber-2", text_color="amber-9")
                if ref.created_at is not None:
                    ui.label(ref.created_at.strftime("%b %d, %Y")).classes(
                        "text-sm text-gray-500"
                    )
            if selected:
                ui.icon("check_circle").classes("text-blue-500")

    def refresh_files() -> None:
        files_container.clear()
        with files_container:
            if not len(state.catalog):
                ui.label("No files uploaded yet").classes("text-gray-400")
            for ref in state.catalog.files:
                render_file(ref)
        load_more_btn.set_visibility(state.catalog.has_more and len(state.catalog) > 0)

    async def load_files(refresh: bool = False) -> None:
        offset = 0 if refresh else state.catalog.next_offset
        try:
            page = await api.list_files(offset=offset, limit=state.catalog.page_size)
        except GatewayError as e:
            ui.notify(e.message, type="negative")
            return
        if refresh:
            state.catalog.refresh(page)
        else:
            state.catalog.merge_page(page)
        refresh_files()

    async def handle_upload(e: events.UploadEventArguments) -> None:
        try:
            reference = await api.upload_file(
                await e.file.read(), e.file.name, e.file.content_type
            )
        except GatewayError as err:
            ui.notify(err.message, type="negative")
            return
        state.selection.add(reference.file_id)
        ui.notify("File uploaded successfully!", type="positive")
        await load_files(refresh=True)
        update_controls()

    # === Chat ===

    def render_message(entry: TranscriptEntry) -> None:
        bubble, avatar, icon, who = ROLE_STYLE[entry.role]
        is_user = entry.role is Role.USER
        align = "justify-end" if is_user else "justify-start"

        with ui.row().classes(f"w-full {align} gap-3 items-end"):
            if not is_user:
                with ui.element("div").classes(
                    f"w-9 h-9 rounded-full flex items-center justify-center {avatar}"
                ):
                    ui.icon(icon).classes("text-white text-lg")
            with ui.column().classes("max-w-[85%] gap-1"):
                ui.label(who).classes("text-xs font-medium text-gray-500")
                with ui.element("div").classes(f"px-4 py-3 {bubble}"):
                    if entry.role is Role.ASSISTANT:
                        content = markdown_to_html(entry.content)
                    else:
                        content = (
                            entry.content.replace("&", "&amp;")
                            .replace("<", "&lt;")
                            .replace(">", "&gt;")
                            .replace("\n", "<br>")
                        )
                    ui.html(content, sanitize=False).classes("text-sm leading-relaxed")
                ui.label(entry.time).classes("text-[10px] text-gray-400")

    def refresh_messages() -> None:
        messages_container.clear()
        with messages_container:
            if not len(state.transcript):
                with ui.column().classes("w-full h-64 items-center justify-center gap-3"):
                    ui.icon("forum").classes("text-5xl text-gray-300")
                    ui.label("Select documents and ask a question").classes(
                        "text-gray-400"
                    )
            for entry in state.transcript.entries:
                render_message(entry)

    def update_controls() -> None:
        count = len(state.selection)
        selection_label.set_text(f"{count} file(s) selected" if count else "")
        placeholder = (
            "Ask a question about the selected documents..."
            if count
            else "Please select documents first..."
        )
        input_field.props(f'placeholder="{placeholder}"')
        if state.is_busy or not count:
            input_field.disable()
        else:
            input_field.enable()
        if state.can_submit(input_field.value or ""):
            send_btn.enable()
        else:
            send_btn.disable()
        send_btn.set_text("Thinking..." if state.is_busy else "Ask")

    def on_phase(phase: CyclePhase) -> None:
        if phase in STATUS_MESSAGES:
            status_label.set_text(STATUS_MESSAGES[phase])
            status_row.set_visibility(True)
        else:
            status_row.set_visibility(False)
        if phase is CyclePhase.IDLE:
            refresh_messages()
        update_controls()

    flow = QuestionFlow(api, on_phase=on_phase)

    async def send_message() -> None:
        question = input_field.value or ""
        if not state.can_submit(question):
            return
        try:
            entries = await flow.submit(state, question)
        except GatewayError as e:
            ui.notify(e.message, type="warning")
            return
        if entries and entries[-1].role is Role.ASSISTANT:
            input_field.value = ""
        elif entries:
            ui.notify("Something went wrong. Please try again.", type="negative")
        update_controls()

    # === UI Layout ===
    with ui.column().classes("w-full max-w-6xl mx-auto p-4 md:p-8 gap-6"):
        with ui.row().classes("w-full header card px-5 py-4 items-center gap-3"):
            ui.icon("description").classes("text-white text-3xl")
            ui.label("DocChat").classes("text-lg font-semibold text-white")

        with ui.row().classes("w-full gap-6 items-start no-wrap"):
            with ui.column().classes("flex-grow gap-6"):
                with ui.column().classes("w-full card p-6 gap-3"):
                    ui.label("Upload Document").classes("text-xl font-semibold")
                    ui.upload(
                        on_upload=handle_upload,
                        auto_upload=True,
                        max_file_size=MAX_UPLOAD_SIZE,
                        on_rejected=lambda: ui.notify(
                            "File is too large. Maximum size is 100MB", type="negative"
                        ),
                    ).props('accept=".pdf,.txt" flat bordered').classes("w-full")
                    ui.label("PDF or TXT files only (max 100MB)").classes(
                        "text-xs text-gray-500"
                    )

                with ui.column().classes("w-full card p-6 gap-3"):
                    ui.label("Your Files").classes("text-xl font-semibold")
                    files_container = ui.column().classes("w-full gap-3")
                    load_more_btn = ui.button(
                        "Load More", icon="expand_more", on_click=lambda: load_files()
                    ).props("flat")

            with ui.column().classes("w-[28rem] card p-6 gap-3").style(
                "height: calc(100vh - 12rem)"
            ):
                with ui.row().classes("w-full items-center justify-between"):
                    ui.label("Chat").classes("text-xl font-semibold")
                    selection_label = ui.label().classes("text-sm text-gray-500")

                with ui.scroll_area().classes("flex-grow w-full"):
                    messages_container = ui.column().classes("w-full gap-4")
                    with ui.row().classes("w-full justify-center p-4") as status_row:
                        with ui.row().classes("gap-1"):
                            for _ in range(3):
                                ui.element("div").classes("typing-dot")
                        status_label = ui.label().classes("text-sm text-gray-500 italic")
                    status_row.set_visibility(False)

                with ui.row().classes("w-full gap-2 items-center no-wrap"):
                    input_field = (
                        ui.input(on_change=lambda: update_controls())
                        .props("outlined dense")
                        .classes("flex-grow")
                        .on("keydown.enter", send_message)
                    )
                    send_btn = ui.button("Ask", on_click=send_message)

    refresh_files()
    refresh_messages()
    update_controls()
    ui.timer(0.1, load_files, once=True)


def main() -> None:
    ui.run(title="DocChat", port=int(os.getenv("UI_PORT", "8080")), reload=False)


if __name__ == "__main__":
    main()
