"""
Skill Bundle Tool

Fetch every file belonging to a skill folder in one call.
"""

import asyncio
from typing import Any, Optional

from copilot_catalog.catalog import ContentCatalog, IndexCache, NotFoundError, Skill
from copilot_catalog.mcp_types import (
    ToolCategory,
    ToolContext,
    ToolHandlerResult,
    ToolInput,
)
from copilot_catalog.tools.base import BaseTool
from copilot_catalog.utils import Logger


class LoadSkillDirectoryTool(BaseTool):
    """
    Load all files of a skill concurrently.
    
    Files that fail to fetch are logged and left out; the call still
    succeeds with whatever was retrieved. Cancellation is checked before
    each fetch and once more after all of them settle.
    """
    
    def __init__(self, logger: Logger, index_cache: IndexCache):
        super().__init__(logger, index_cache, {
            'category': ToolCategory.CONTENT,
            'streaming': True,
        })
    
    @property
    def name(self) -> str:
        return "load_skill_directory"
    
    @property
    def description(self) -> str:
        return """Load all files in a skill directory.

REQUIRED: name (skill name as returned by search)

Returns {name, files: [{path, content}]}. Files that cannot be fetched are skipped."""
    
    @property
    def inputSchema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "name": {
                    "type": "string",
                    "description": "The name of the skill."
                }
            },
            "required": ["name"]
        }
    
    async def execute(self, input: ToolInput, context: ToolContext) -> ToolHandlerResult:
        """Execute skill bundle load."""
        try:
            self.checkCancelled(context)
            self.requireValidInput(input)
            
            name: str = input.get("name")
            index = await self.index_cache.get()
            self.checkCancelled(context)
            
            skill = ContentCatalog(index).find_by_name("skill", name)
            if skill is None:
                raise NotFoundError(f"Skill not found: {name}")
            
            files = await self.load_files(skill, context)
            self.checkCancelled(context)
            
            self.logExecution(context, success=True)
            return self.success({
                "name": skill.name,
                "files": files,
            })
        
        except Exception as e:
            return await self.handleError(e, context)
    
    async def load_files(self, skill: Skill, context: ToolContext) -> list[dict[str, str]]:
        """Fetch the skill's files, keeping declaration order for the survivors."""
        directory = skill.directory
        
        async def fetch(relative: str) -> Optional[dict[str, str]]:
            self.checkCancelled(context)
            full_path = f"{directory}/{relative}" if directory else relative
            try:
                content = await self.index_cache.fetch_file(full_path)
            except Exception as e:
                self.logger.warning(f"Failed to load file {relative} for skill {skill.name}: {e}")
                return None
            context.emitPartial({"path": relative})
            return {"path": relative, "content": content}
        
        results = await asyncio.gather(*(fetch(f) for f in skill.file_list))
        return [r for r in results if r is not None]
