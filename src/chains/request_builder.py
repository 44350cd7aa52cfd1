"""Prompt construction for consultation, generation and chat edits.

Everything here is plain templating over a ``GenerationRequest``; there are
no failure modes.
"""

from enum import Enum

from pydantic import BaseModel, Field

from src.chains.assets import AudioAssets
from src.config import settings


class Difficulty(str, Enum):
    """Game difficulty levels."""

    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"


DIFFICULTY_LABELS = {
    Difficulty.EASY: "Dễ",
    Difficulty.MEDIUM: "Vừa",
    Difficulty.HARD: "Khó",
}

AGE_GROUPS = [
    "Mầm non (3-5 tuổi)",
    "Tiểu học (6-10 tuổi)",
    "Trung học cơ sở (11-15 tuổi)",
    "Trung học phổ thông (16+ tuổi)",
    "Mọi lứa tuổi",
]

DEFAULT_DOCUMENT_IDEA = "Tạo trò chơi giáo dục dựa trên nội dung tài liệu đính kèm."
DEFAULT_CLARIFICATION = "Hãy tự quyết định logic game phù hợp nhất."


class GenerationRequest(BaseModel):
    """Everything needed for one game generation call."""

    idea: str = Field(default="", description="Mô tả trò chơi")
    age_group: str = Field(default=AGE_GROUPS[1], description="Độ tuổi người chơi")
    difficulty: Difficulty = Field(default=Difficulty.MEDIUM, description="Mức độ thử thách")
    clarification: str = Field(default="", description="Trả lời câu hỏi làm rõ")
    document_text: str | None = Field(default=None, description="Nội dung tài liệu PDF")
    audio: AudioAssets = Field(default_factory=AudioAssets, description="Âm thanh tùy chỉnh")

    @property
    def effective_idea(self) -> str:
        return resolve_idea(self.idea, self.document_text)

    def has_content(self) -> bool:
        """Whether there is an idea or a document to build a game from."""
        return bool(self.idea.strip() or (self.document_text or "").strip())


def resolve_idea(idea: str, document_text: str | None) -> str:
    """Fall back to the default idea when only a document was supplied."""
    if idea.strip():
        return idea.strip()
    if document_text and document_text.strip():
        return DEFAULT_DOCUMENT_IDEA
    return idea


CONSULTATION_PROMPT = """Bạn là GAME DESIGNER chuyên nghiệp cho trò chơi giáo dục.
Ý tưởng: "{idea}" (Tuổi: {age_group}).
Hãy đặt **MỘT CÂU HỎI DUY NHẤT** để làm rõ cơ chế game.
Chỉ trả về câu hỏi, không giải thích thêm."""


GENERATION_PROMPT = """Bạn là MỘT ENGINE TẠO GAME TỰ ĐỘNG.
NHIỆM VỤ: Trả về code HTML5 single-file CHẠY ĐƯỢC 100%. Chỉ trả về code.

🚨 **FAIL-SAFE PROTOCOLS:**
1. **Error Handling:** Chèn script `window.onerror` ngay đầu thẻ body.
2. **Variable Safety:** Khai báo toàn bộ biến ở đầu script.
3. **Asset Priority:** Dùng đúng các nguồn âm thanh bên dưới. Giá trị dạng __CUSTOM_..._TOKEN__ là TOKEN: chép NGUYÊN VĂN vào src, KHÔNG được sửa đổi token.
4. **Loop Protection:** Bọc gameLoop trong try-catch.
5. **Autoplay Bypass:** Có màn hình CLICK TO START trước khi phát âm thanh.
6. **Mute Button:** Có nút bật/tắt âm thanh.

🎨 **VISUAL STYLE:** Hoạt hình 3D rực rỡ, dùng EMOJI làm sprite, nút bấm to. Canvas full màn hình.

🎮 **GAME INFO:**
- Ý tưởng: "{idea}"
- Chi tiết: "{clarification}"
- Tuổi: {age_group}. Độ khó: {difficulty}.
- Điều khiển: Chuột & Phím.
{document_section}
🔗 **ÂM THANH (dùng chính xác các giá trị này):**
- Nhạc nền: "{bg_src}"
- Đúng: "{correct_src}"
- Sai: "{wrong_src}"

🛠️ **CẤU TRÚC CODE (TEMPLATE):**
```html
<!DOCTYPE html>
<html>
<head><meta charset="UTF-8"><style>body{{margin:0;overflow:hidden;background:#333}}</style></head>
<body>
  <script>window.onerror=function(m){{document.body.innerHTML+='<div style="position:fixed;top:0;background:red;color:white;z-index:9999">⚠️ '+m+'</div>'}}</script>
  <canvas id="gameCanvas"></canvas>
  <script>
    const canvas = document.getElementById('gameCanvas');
    const ctx = canvas.getContext('2d');
    let gameState = 'START';
    let isMuted = false;
    const sounds = {{
      bg: new Audio('{bg_src}'),
      correct: new Audio('{correct_src}'),
      wrong: new Audio('{wrong_src}')
    }};
    sounds.bg.loop = true; sounds.bg.volume = 0.6;
    function playSound(t) {{
      if (isMuted) return;
      try {{
        const s = sounds[t];
        if (t !== 'bg') s.currentTime = 0;
        s.play().catch(e => console.log(e));
      }} catch (e) {{}}
    }}
    function init() {{ canvas.width = innerWidth; canvas.height = innerHeight; }}
    function loop() {{
      requestAnimationFrame(loop);
      try {{
        ctx.clearRect(0, 0, canvas.width, canvas.height);
        // Vẽ UI, logic game, nút MUTE / REPLAY / START
      }} catch (e) {{ console.error(e); }}
    }}
    window.addEventListener('mousedown', (e) => {{ /* Xử lý click */ }});
    init(); loop();
  </script>
</body>
</html>
```"""

DOCUMENT_SECTION = """
📄 **TÀI LIỆU THAM KHẢO (dùng làm nội dung câu hỏi/kiến thức trong game):**
\"\"\"
{document_text}
\"\"\"
"""


EDIT_PROMPT = """CODE HTML:
```html
{code}
```
YÊU CẦU: "{message}"

Hãy sửa code theo yêu cầu và trả về TOÀN BỘ file HTML hoàn chỉnh trong một khối ```html.
Giữ NGUYÊN VĂN mọi token dạng __EMBEDDED_ASSET_n__ (đó là dữ liệu âm thanh).
Nếu yêu cầu chỉ là câu hỏi, hãy trả lời ngắn gọn bằng lời, không kèm code."""


def build_consultation_prompt(idea: str, age_group: str) -> str:
    """Prompt asking the model for one clarifying question."""
    return CONSULTATION_PROMPT.format(idea=idea, age_group=age_group)


def build_generation_prompt(request: GenerationRequest, audio_sources: dict[str, str]) -> str:
    """Render the full code generation instructions.

    Args:
        request: Game parameters.
        audio_sources: Slot -> src value (sentinel token or default URL).

    Returns:
        Instruction text with no binary payloads in it.
    """
    document_section = ""
    if request.document_text and request.document_text.strip():
        document_text = request.document_text.strip()[: settings.max_document_chars]
        document_section = DOCUMENT_SECTION.format(document_text=document_text)

    return GENERATION_PROMPT.format(
        idea=request.effective_idea,
        clarification=request.clarification or DEFAULT_CLARIFICATION,
        age_group=request.age_group,
        difficulty=DIFFICULTY_LABELS[request.difficulty],
        document_section=document_section,
        bg_src=audio_sources["background"],
        correct_src=audio_sources["correct"],
        wrong_src=audio_sources["incorrect"],
    )


def build_edit_prompt(code: str, message: str) -> str:
    """Prompt carrying the (masked) artifact and the change request."""
    return EDIT_PROMPT.format(code=code, message=message)
