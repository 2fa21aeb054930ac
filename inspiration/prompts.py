"""Prompt templates for the AI gateway (the product language is Chinese)."""
from .schemas import CATEGORIES

_CATEGORY_LIST = "、".join(CATEGORIES)

ANALYSIS_SHAPE = f"""只返回 JSON，不要附加任何解释，格式如下：
{{
  "topic": "笔记讨论的核心话题",
  "people": ["提到的人名或称呼"],
  "category": "只能取以下之一：{_CATEGORY_LIST}",
  "summary": "一句话摘要"
}}"""


def analysis_prompt(content: str, describe_shape: bool = True) -> str:
    prompt = "请分析下面这条灵感笔记，提取话题、涉及的人员和所属类别。\n"
    if describe_shape:
        prompt += ANALYSIS_SHAPE + "\n"
    else:
        prompt += f"类别只能取以下之一：{_CATEGORY_LIST}。\n"
    return prompt + f'\n笔记内容："{content}"'


TRANSLATE = """请翻译下面的内容：如果主要是中文，就译成英文；如果主要是英文，就译成中文。
语气保持专业，技术名词使用准确的通用译法。只返回译文。
内容：
{content}"""

PROOFREAD = """请校对并润色下面的内容：
1. 理顺逻辑，让表达更清晰
2. 检查用词是否准确
3. 改正语法错误
4. 不改变原意，让行文更专业
只返回修改后的全文。
内容：
{content}"""

FORMAT = """请对下面的内容做排版规范化：
1. 中文与英文之间加半角空格
2. 中文与数字之间加半角空格
3. 英文与数字之间加半角空格
4. 按主要语言统一中英文引号
5. 整理段落和列表格式
只返回处理后的全文。
内容：
{content}"""

MINDMAP = """请把下面的文档转换成思维导图的 JSON 结构：
1. 根节点是文档标题或核心主题
2. 分支是主要章节或观点
3. 叶子节点是具体细节
4. 层级清晰
只返回 JSON，格式：{{"name": "根节点", "children": [{{"name": "分支", "children": [...]}}]}}
内容：
{content}"""

CHAT = """你是一名写作助手。
背景资料（之前记录的笔记）：
{context}

正在编辑的文档：
{content}

用户指令：{message}

请结合背景资料和当前文档完成指令。如果是修改文档，直接返回修改后的完整 Markdown 全文；如果是提问，直接给出回答。"""

DOCUMENT_TEMPLATES = {
    "translate": TRANSLATE,
    "proofread": PROOFREAD,
    "format": FORMAT,
    "mindmap": MINDMAP,
}


def document_prompt(content: str, action: str) -> str:
    return DOCUMENT_TEMPLATES[action].format(content=content)


def chat_prompt(content: str, context: str, message: str) -> str:
    return CHAT.format(content=content, context=context, message=message)
