"""Streamlit web application for educational game generation."""

import streamlit as st
import streamlit.components.v1 as components

from src.chains.request_builder import AGE_GROUPS, Difficulty, GenerationRequest
from src.config import settings
from src.credentials import CredentialStore
from src.ingestion import DocumentExtractionError, extract_text_from_pdf
from src.ui.api_client import APIClient
from src.ui.session import GameSession
from src.ui.state import GenerationState, GenerationStatus
from src.ui.utils import artifact_download, build_audio_assets, format_difficulty, format_status

# Page configuration
st.set_page_config(
    page_title="Làm Game Cực Dễ",
    page_icon="🎮",
    layout="wide",
)

# Initialize API client and local key store
api_client = APIClient()
credential_store = CredentialStore(settings.credential_store_path)

MAX_KEY_SLOTS = 4


def init_session_state():
    """Initialize session state variables."""
    if "game_session" not in st.session_state:
        st.session_state.game_session = GameSession(
            client=api_client,
            api_keys=credential_store.load(),
        )
    if "document_text" not in st.session_state:
        st.session_state.document_text = None


def get_session() -> GameSession:
    return st.session_state.game_session


def render_sidebar():
    """Render sidebar with API key settings."""
    session = get_session()

    with st.sidebar:
        st.title("⚙️ Cài đặt API (Multi-Key)")
        st.caption(
            "Các API Key được lưu trên máy của bạn và chỉ được gửi tới Google Gemini. "
            "Nhập nhiều key để tránh giới hạn lượt dùng; mỗi lần gọi sẽ chọn ngẫu nhiên 1 key."
        )

        slots = (session.api_keys + [""] * MAX_KEY_SLOTS)[:MAX_KEY_SLOTS]
        entered = [
            st.text_input(f"API Key số {i + 1}", value=key, type="password", key=f"api_key_{i}")
            for i, key in enumerate(slots)
        ]
        if st.button("💾 Lưu cài đặt", type="primary"):
            session.set_api_keys(credential_store.save(entered))
            st.success(f"Đã lưu {len(session.api_keys)} key")

        if not session.api_keys:
            st.info("Chưa có API Key riêng: máy chủ sẽ dùng key mặc định (nếu có).")

        render_help()

        st.subheader("Máy chủ")
        if api_client.health_check():
            st.success("✅ Kết nối OK")
        else:
            st.error("❌ Không kết nối được máy chủ tạo game")

        st.divider()
        st.caption("Làm Game Cực Dễ v0.1.0 · Powered by Google Gemini")


def render_help():
    """Render the usage guide."""
    with st.expander("❓ Hướng dẫn sử dụng"):
        st.markdown(
            "**Cách tạo game**\n"
            "1. Chọn độ tuổi và mức độ thử thách.\n"
            "2. Mô tả trò chơi, hoặc đính kèm tài liệu PDF làm nội dung câu hỏi.\n"
            "3. Nhấn « Tạo Game Ngay! » và trả lời câu hỏi của AI ở khung chat.\n"
            "4. Chơi thử, nhờ trợ lý sửa đổi, rồi tải game về (file HTML).\n"
        )
        st.markdown(
            "**Lấy Google Gemini API Key**\n"
            "1. Truy cập [Google AI Studio](https://aistudio.google.com/app/apikey) "
            "và đăng nhập bằng tài khoản Google.\n"
            "2. Nhấn « Create API key » và sao chép key.\n"
            "3. Dán key vào ô API Key ở trên rồi nhấn « Lưu cài đặt ».\n"
        )


def render_input_section(preview_slot):
    """Render the idea form."""
    session = get_session()
    st.header("🪄 Ý Tưởng Mới")

    age_group = st.selectbox("Độ tuổi người chơi", options=AGE_GROUPS, index=1)
    difficulty = st.radio(
        "Mức độ thử thách",
        options=list(Difficulty),
        index=1,
        format_func=format_difficulty,
        horizontal=True,
    )
    idea = st.text_area(
        "Mô tả trò chơi",
        height=160,
        placeholder=(
            "Ví dụ: Game tính nhẩm nhanh, trả lời đúng thì phi thuyền bay lên cao. "
            "Giao diện vũ trụ màu tối, có sao lấp lánh..."
        ),
    )

    pdf_file = st.file_uploader("Tài liệu tham khảo (PDF, tùy chọn)", type=["pdf"])
    if pdf_file is not None:
        try:
            st.session_state.document_text = extract_text_from_pdf(pdf_file.getvalue())
            st.caption(f"📄 Đã đọc {len(st.session_state.document_text)} ký tự từ tài liệu")
        except DocumentExtractionError as e:
            st.session_state.document_text = None
            st.error(str(e))
    else:
        st.session_state.document_text = None

    with st.expander("🔊 Âm thanh tùy chỉnh (tùy chọn)"):
        bg_file = st.file_uploader("Nhạc nền", type=["mp3", "wav", "ogg"])
        correct_file = st.file_uploader("Âm thanh trả lời đúng", type=["mp3", "wav", "ogg"])
        wrong_file = st.file_uploader("Âm thanh trả lời sai", type=["mp3", "wav", "ogg"])

    request = GenerationRequest(
        idea=idea,
        age_group=age_group,
        difficulty=difficulty,
        document_text=st.session_state.document_text,
        audio=build_audio_assets(bg_file, correct_file, wrong_file),
    )

    is_disabled = session.is_busy or not request.has_content()
    if st.button("✨ Tạo Game Ngay!", type="primary", disabled=is_disabled):
        session.on_state_change = lambda state: render_preview(preview_slot, state)
        with st.spinner("AI đang suy nghĩ..."):
            session.submit(request)
        st.rerun()


def render_preview(slot, state: GenerationState):
    """Render the game area for one state value."""
    with slot.container():
        st.caption(f"Trạng thái: {format_status(state.status.value)}")

        if state.status == GenerationStatus.ERROR:
            st.error(f"❌ {state.error}")
        elif state.status == GenerationStatus.STREAMING:
            st.code(state.code, language="html")
        elif state.status == GenerationStatus.SUCCESS and state.code:
            components.html(state.code, height=640, scrolling=True)
        elif state.status == GenerationStatus.CONSULTING:
            st.info("💬 Hãy trả lời câu hỏi của AI ở khung chat để bắt đầu tạo game")
        else:
            st.info("👈 Nhập ý tưởng và nhấn « Tạo Game Ngay! »")


def render_output_section(preview_slot):
    """Render preview and download."""
    session = get_session()
    render_preview(preview_slot, session.state)

    if session.state.status == GenerationStatus.SUCCESS and session.state.code:
        download = artifact_download(session.state.code)
        st.download_button(
            label="📥 Tải game về (HTML)",
            data=download.data,
            file_name=download.file_name,
            mime=download.mime,
        )
        with st.expander("Xem code"):
            st.code(session.state.code, language="html")


def render_chat_section(preview_slot):
    """Render the chat panel (consultation answers and edit requests)."""
    session = get_session()
    title = "Kiến Trúc Sư Game" if session.is_consulting else "Trợ Lý Sáng Tạo"
    st.subheader(f"💬 {title}")

    for message in session.messages:
        with st.chat_message(message.role):
            st.markdown(message.text)

    placeholder = "Trả lời câu hỏi của AI..." if session.is_consulting else "Nhập yêu cầu sửa đổi..."
    prompt = st.chat_input(placeholder, disabled=session.state.status == GenerationStatus.LOADING)
    if prompt:
        session.on_state_change = lambda state: render_preview(preview_slot, state)
        with st.spinner("Đang xử lý..."):
            session.send_chat(prompt)
        st.rerun()


def main():
    """Main application entry point."""
    init_session_state()

    st.title("🎮 Làm Game Cực Dễ")
    st.caption("Mô tả trò chơi giáo dục, AI sẽ viết game HTML5 cho bạn")

    render_sidebar()

    col1, col2 = st.columns([1, 2])
    with col2:
        st.header("🕹️ Trò chơi")
        preview_slot = st.empty()
        render_output_section(preview_slot)

    with col1:
        render_input_section(preview_slot)

    st.divider()
    render_chat_section(preview_slot)


if __name__ == "__main__":
    main()
