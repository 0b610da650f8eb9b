"""Prompt templates for commit messages, tag messages and changelog summaries."""

from __future__ import annotations

COMMIT_SYSTEM_PROMPT = """\
You are a helpful assistant that generates concise and meaningful git commit messages.

Rules for commit messages:
1. {prefix_rule}
2. Keep the first line under 50 characters
3. Use the imperative, present tense ("add" not "added" or "adds")
4. Be specific about what changed
5. {breaking_rule}
6. {shape_rule}
7. {language_rule}

Focus on the actual changes shown in the diff and file list. \
Output only the commit message, without quotes or code fences.\
"""

CONVENTIONAL_PREFIX_RULE = (
    "Use the format: type(scope): summary. "
    "Types: feat, fix, build, chore, ci, docs, style, refactor, perf, test. "
    "Do not preface the message with anything else"
)

GITMOJI_PREFIX_RULE = """\
Use the GitMoji convention: start with one emoji, then the summary. \
Choose the emoji from this list (emoji, meaning):
   🐛 fix a bug; ✨ introduce new features; 📝 add or update documentation;
   🚀 deploy stuff; ✅ add, update, or pass tests; ♻️ refactor code;
   ⬆️ upgrade dependencies; 🔧 add or update configuration files;
   🌐 internationalization and localization; 💡 add or update comments;
   🔥 remove code or files; 🚑️ critical hotfix; ⚡️ improve performance;
   💥 introduce breaking changes; 🔖 release / version tags\
"""

SINGLE_LINE_BREAKING_RULE = (
    'If the change breaks compatibility, mark it with "!" before the colon '
    '(e.g. "feat(api)!: drop v1 endpoints")'
)

MULTI_LINE_BREAKING_RULE = (
    'If the change breaks compatibility, add a "BREAKING CHANGE: <description>" '
    "footer to the body"
)

SINGLE_LINE_SHAPE_RULE = "Write a single subject line with no body"

MULTI_LINE_SHAPE_RULE = (
    "After the subject, add a blank line and a short body explaining what "
    "changed and why; wrap body lines at {max_length} characters"
)

TAG_SYSTEM_PROMPT = """\
You are a helpful assistant that generates informative git tag messages.

Rules for tag messages:
1. Start with a one-sentence summary of the release
2. Follow with the key changes and improvements
3. Call out any breaking changes explicitly
4. Keep it concise but informative
5. Use bullet points for multiple changes
6. {language_rule}

Output only the tag message, without code fences.\
"""

CHANGELOG_SYSTEM_PROMPT = """\
You are a helpful assistant that generates changelog summaries from git commits.

Rules for changelog:
1. Group changes by category (Features, Fixes, Improvements, Documentation, etc.) \
using "### <Category>" headings
2. Use markdown bullet points for each change
3. Reference the commit SHA for each change, e.g. "(abc12345)"
4. Keep descriptions concise but clear
5. Sort changes by importance within each group
6. Do not add a version heading or date; they are added separately
7. {language_rule}\
"""

DEFAULT_INSTRUCTIONS: dict[str, str] = {
    "commit": "Generate a commit message for the following changes.",
    "tag": "Generate a tag message for the following release.",
    "changelog": "Summarize the following commits as a changelog entry.",
}

# Language directives keyed by primary language subtag.
_LANGUAGE_DIRECTIVES: dict[str, str] = {
    "en": "Write the {artifact} in English.",
    "zh": "请使用中文生成{artifact_zh}。",
}

_ARTIFACT_ZH: dict[str, str] = {
    "commit message": "提交消息",
    "tag message": "标签消息",
    "changelog": "变更日志",
}


def language_rule(locale: str, artifact: str) -> str:
    """Return the output-language directive for a BCP 47 locale tag."""
    primary = locale.replace("_", "-").split("-")[0].lower()
    template = _LANGUAGE_DIRECTIVES.get(primary)
    if template is None:
        return f"Write the {artifact} in the language of locale '{locale}'."
    return template.format(artifact=artifact, artifact_zh=_ARTIFACT_ZH.get(artifact, artifact))
