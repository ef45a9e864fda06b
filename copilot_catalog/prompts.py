"""
Catalog Prompts

Prompt templates advertised over MCP `prompts/list` and `prompts/get`.
"""

import textwrap
from typing import Any, Optional

from copilot_catalog.catalog import InvalidArgumentError

SEARCH_PROMPT_NAME = "get_search_prompt"


def search_prompt_text(keyword: str) -> str:
    return textwrap.dedent(f"""\
        Please search all the skills, instructions, prompts, agents, and collections that are related to the search keyword: `{keyword}`

        **IMPORTANT: Execute the search tool immediately. Do not ask for confirmation before searching.**

        Here's the process to follow:
        1. Call the `search` tool NOW with query="{keyword}".
        2. Do NOT load any skills, instructions, prompts, or agents until the user asks to do so.
        3. Scan local skills, instructions, prompts, and agents markdown files (collections are index files and are not saved locally).
           - Skills: `.github/skills/<skill_name>/` (folder, not individual files)
           - Instructions: `.github/instructions/*.instructions.md`
           - Prompts: `.github/prompts/*.prompt.md`
           - Agents: `.github/agents/*.agent.md`
        4. Compare the existing files with the search results.
        5. Answer with a table:

           | Exists | Type         | Name                         | Title         | Description   |
           |--------|--------------|------------------------------|---------------|---------------|
           | ✅     | skills       | dev-toolkit                  | Dev Toolkit   | Description 1 |
           | ❌     | instructions | instruction1.instructions.md | Instruction 1 | Description 1 |

           For skills the Name column is the skill folder name, not SKILL.md.
        6. If any item is missing locally, ask which one the user wants to save.
        7. To save an item:
           a. Use the `download` tool to get its URL and save the content with NO modification.
           b. For skills use `load_skill_directory`, then write each returned file under `.github/skills/<skill_name>/`.
        8. Collections are for discovery only. If the user wants items from a collection, save those items individually.
        9. Never install or save anything without explicit confirmation.
        """)


class CatalogPrompts:
    """The prompt set exposed by the server."""
    
    def list_prompts(self) -> list[dict[str, Any]]:
        return [
            {
                "name": SEARCH_PROMPT_NAME,
                "description": "Provides an interactive prompt for searching catalog content",
                "arguments": [
                    {
                        "name": "keyword",
                        "description": "The keyword to search for",
                        "required": True,
                    }
                ],
            }
        ]
    
    def get_prompt(self, name: str, arguments: Optional[dict[str, Any]] = None) -> dict[str, Any]:
        """Render a prompt. Unknown names and missing arguments raise InvalidArgumentError."""
        if name != SEARCH_PROMPT_NAME:
            raise InvalidArgumentError(f"Unknown prompt: {name}")
        
        keyword = (arguments or {}).get("keyword")
        if keyword is None:
            raise InvalidArgumentError(f"Missing keyword for {SEARCH_PROMPT_NAME}")
        
        return {
            "description": "Interactive prompt guidance for searching catalog content",
            "messages": [
                {
                    "role": "user",
                    "content": {"type": "text", "text": search_prompt_text(str(keyword))},
                }
            ],
        }
