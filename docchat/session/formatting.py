"""Display formatting for generated answers.

``format_response`` only rearranges whitespace and promotes labels to
headings; the words of the answer are left untouched.
"""

import re

_QUESTION_LABEL = re.compile(r"\*\*Question \d+\*\*")
_ANSWER_LABEL = re.compile(r"\*\*Answer\*\*")
_LETTERED_OPTION = re.compile(r"([A-D]\.)(?=\s)")

_LINK = re.compile(r"\[([^\]]+)\]\(([^)\s]+)\)")
_LINK_SCHEMES = ("http://", "https://", "mailto:")
_PLACEHOLDER = re.compile(r"\x00(\d+)\x00")


def format_response(content: str) -> str:
    """Isolate labeled questions, answers and lettered options.

    ``**Question N**`` becomes a level-3 heading, ``**Answer**`` a level-4
    heading, and options ``A.``-``D.`` start on their own line.
    """
    content = _QUESTION_LABEL.sub(lambda m: f"\n### {m.group(0)}\n", content)
    content = _ANSWER_LABEL.sub("\n#### Answer ", content)
    content = _LETTERED_OPTION.sub(r"\n\1", content)
    return content.strip()


def _wrap_lists(text: str, item: str, open_tag: str, close_tag: str) -> str:
    lines = text.split("\n")
    in_list = False
    result = []
    for line in lines:
        stripped = line.strip()
        if re.match(item, stripped):
            if not in_list:
                result.append(open_tag)
                in_list = True
            result.append(f"<li>{re.sub(item, '', stripped)}</li>")
        else:
            if in_list:
                result.append(close_tag)
                in_list = False
            result.append(line)
    if in_list:
        result.append(close_tag)
    return "\n".join(result)


def markdown_to_html(text: str) -> str:
    """Convert markdown to HTML for chat display.

    Supports: headings (### and ####), bold, italic, inline code, code
    blocks, links, lists.
    """
    # Escape HTML entities first
    text = (
        text.replace("\x00", "")
        .replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
        .replace("'", "&#x27;")
    )

    # Code blocks (```code```)
    text = re.sub(
        r"```(\w*)\n?([\s\S]*?)```",
        r'<pre class="bg-gray-800 text-gray-100 rounded-lg p-3 my-2 overflow-x-auto text-xs"><code>\2</code></pre>',
        text,
    )

    # Inline code (`code`)
    text = re.sub(
        r"`([^`]+)`",
        r'<code class="bg-gray-200 text-pink-600 px-1.5 py-0.5 rounded text-xs">\1</code>',
        text,
    )

    # Links are set aside so emphasis markers inside URLs stay literal
    anchors: list[str] = []

    def stash_link(match: re.Match[str]) -> str:
        label, url = match.group(1), match.group(2)
        if url.lower().startswith(_LINK_SCHEMES):
            anchors.append(
                f'<a href="{url}" class="text-blue-600 underline" target="_blank" '
                f'rel="noopener noreferrer">{label}</a>'
            )
        else:
            anchors.append(label)
        return f"\x00{len(anchors) - 1}\x00"

    text = _LINK.sub(stash_link, text)

    # Headings produced by format_response
    text = re.sub(
        r"^#### (.+)$", r'<h4 class="text-md font-medium mt-3 mb-2">\1</h4>', text, flags=re.M
    )
    text = re.sub(
        r"^### (.+)$", r'<h3 class="text-lg font-semibold mt-4 mb-2">\1</h3>', text, flags=re.M
    )

    # Bold (**text** or __text__)
    text = re.sub(r"\*\*(.+?)\*\*", r"<strong>\1</strong>", text)
    text = re.sub(r"__(.+?)__", r"<strong>\1</strong>", text)

    # Italic (*text* or _text_)
    text = re.sub(r"\*([^*]+)\*", r"<em>\1</em>", text)
    text = re.sub(r"(?<!\w)_([^_]+)_(?!\w)", r"<em>\1</em>", text)

    text = _wrap_lists(
        text, r"^[-*]\s+", '<ul class="list-disc list-inside my-2 space-y-1">', "</ul>"
    )
    text = _wrap_lists(
        text, r"^\d+\.\s+", '<ol class="list-decimal list-inside my-2 space-y-1">', "</ol>"
    )

    # Line breaks (preserve newlines as <br>)
    text = re.sub(r"(</h[34]>)\n", r"\1", text)
    text = text.replace("\n", "<br>")

    return _PLACEHOLDER.sub(lambda m: anchors[int(m.group(1))], text)
