import json
import logging
from typing import Any, Dict, List, Optional
from openai import AzureOpenAI
from glamping.core.config import settings
from glamping.core.exceptions import AIServiceError
from glamping.schemas.member import AIAnalysisResult, Member

# Set up logging
logger = logging.getLogger(__name__)

NO_DATA_SUMMARY = "無足夠資料進行分析。"

OCCUPANCY_PROMPT = """你是一位專業的資料錄入員。請分析這張訂房報表：

1. **精準辨識房號**：如 201, 尊1 等。
2. **入住天數（重要）**：特別留意備註欄或天數欄。若看到 '2泊', '3天2夜', '續住'，請務必填入 stayDurationInfo。
3. **忽略飲食禁忌**：不要提取任何關於食物的要求。
4. **格式規範**：回傳 JSON 物件 {"rows": [...]}，每一列包含 roomCode, guestName, checkInDate (YYYY-MM-DD), adults, children, stayDurationInfo。"""


class AzureOpenAIService:
    """Text and vision helpers for the console; every text call has a fallback."""

    def __init__(self, client: Optional[Any] = None):
        self.deployment_name = settings.AZURE_OPENAI_DEPLOYMENT_NAME

        if client is not None:
            self.client = client
            return

        if not settings.AZURE_OPENAI_ENDPOINT or not settings.AZURE_OPENAI_API_KEY:
            logger.warning("Azure OpenAI credentials not configured - AI features will use fallbacks")
            self.client = None
            return

        try:
            self.client = AzureOpenAI(
                azure_endpoint=settings.AZURE_OPENAI_ENDPOINT,
                api_key=settings.AZURE_OPENAI_API_KEY,
                api_version=settings.AZURE_OPENAI_API_VERSION,
            )
            logger.info("Azure OpenAI client initialized successfully")
        except Exception as e:
            logger.error(f"Failed to initialize Azure OpenAI client: {e}")
            self.client = None

    def _complete(self, system_prompt: str, user_content: Any, json_mode: bool = False, max_tokens: int = 600) -> str:
        if self.client is None:
            raise AIServiceError("Azure OpenAI is not configured")

        kwargs = {}
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        response = self.client.chat.completions.create(
            model=self.deployment_name,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_content},
            ],
            max_tokens=max_tokens,
            temperature=0.3,
            **kwargs,
        )
        content = response.choices[0].message.content
        if not content:
            raise AIServiceError("AI 未回傳內容")
        return content

    def analyze_member_notes(self, notes: str) -> AIAnalysisResult:
        """Extract structured facts from free-form concierge notes"""
        if not notes or not notes.strip():
            return AIAnalysisResult(summary=NO_DATA_SUMMARY)

        try:
            content = self._complete(
                "你是一位頂級管家，負責整理客戶資料。請使用繁體中文，並回傳 JSON 物件，"
                "欄位為 dietaryRestrictions, specialRequests, tags, summary, suggestedActions。",
                f'分析以下豪華露營客戶筆記： "{notes}"',
                json_mode=True,
            )
            return AIAnalysisResult.model_validate(json.loads(content))
        except Exception as e:
            logger.error(f"❌ Member note analysis failed: {e}")
            return AIAnalysisResult(
                tags=["分析失敗"],
                summary="無法連接至 AI 服務，請確認網路連線。",
            )

    def generate_welcome_message(self, member: Member) -> str:
        try:
            return self._complete(
                "你是愛上喜翁的總管。語氣要優雅且富有詩意。請使用繁體中文。",
                f"為會員 {member.name} 寫一段溫暖的迎賓詞。",
            )
        except Exception as e:
            logger.warning(f"⚠️ Welcome message fallback for {member.name}: {e}")
            return f"親愛的 {member.name} 您好，歡迎回到愛上喜翁。"

    def generate_daily_briefing(self, stats: Optional[Dict[str, Any]]) -> str:
        if not stats:
            return "數據不足。"
        try:
            return self._complete(
                "你是營運總監，提供 3 個精簡的觀察重點。請使用繁體中文。",
                f"根據數據生成營運簡報： {json.dumps(stats, ensure_ascii=False, default=str)}",
            )
        except Exception as e:
            logger.warning(f"⚠️ Daily briefing fallback: {e}")
            return "今日營運數據正常，請注意山區天氣。"

    def generate_kitchen_advice(self, date: str, meal_stats: Dict[str, Any]) -> str:
        try:
            return self._complete(
                "你是行政主廚，提供專業的備料建議。請使用繁體中文。",
                f"今日日期: {date}, 統計: {json.dumps(meal_stats, ensure_ascii=False)}",
            )
        except Exception as e:
            logger.warning(f"⚠️ Kitchen advice fallback: {e}")
            return "連線問題，請直接參考統計數據。"

    def analyze_occupancy_image(self, base64_image: str, mime_type: str = "image/jpeg") -> List[Dict[str, Any]]:
        """Read an occupancy sheet photo into raw rows.

        No fallback here: a failed read must not look like an empty sheet.
        """
        logger.info(f"🖼️ Analyzing occupancy sheet ({mime_type}, {len(base64_image)} chars)")
        try:
            content = self._complete(
                "你是一位專業的資料錄入員，只回傳 JSON。",
                [
                    {"type": "text", "text": OCCUPANCY_PROMPT},
                    {"type": "image_url", "image_url": {"url": f"data:{mime_type};base64,{base64_image}"}},
                ],
                json_mode=True,
                max_tokens=2000,
            )
            data = json.loads(content)
        except AIServiceError:
            raise
        except Exception as e:
            logger.error(f"❌ Occupancy image analysis failed: {e}")
            raise AIServiceError(f"分析失敗: {e}") from e

        rows = data.get("rows", []) if isinstance(data, dict) else data
        if not isinstance(rows, list):
            raise AIServiceError("分析失敗: 回傳格式錯誤")
        logger.info(f"✅ Extracted {len(rows)} rows from occupancy sheet")
        return rows
