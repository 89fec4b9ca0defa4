"""Recipes CRUD API router.

Endpoints:
- GET /api/recipes - List recipes (category / search filters)
- GET /api/recipes/{id} - Get recipe with grouped ingredients and steps
- POST /api/recipes - Create recipe (admin, multipart)
- PUT /api/recipes/{id} - Replace recipe (admin, multipart)
- DELETE /api/recipes/{id} - Delete recipe and its image (admin)
- PATCH /api/recipes/{id}/favorite - Toggle favorite flag
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile

from ..auth import require_admin, require_admin_for_favorites
from ..context import AppContext, get_context, get_repository
from ..repository import RecipeDetail, RecipeFilter, RecipeRepository
from ..schemas import (
    FavoriteToggleResult,
    RecipeDeleteResult,
    RecipeFields,
    RecipeListOut,
    RecipeOut,
    RecipeWriteResult,
)
from ..services.payloads import parse_ingredient_groups, parse_instructions
from ..services.storage import LocalImageStorage

router = APIRouter()
logger = logging.getLogger("kitchen_stories.recipes")


def _recipe_to_out(detail: RecipeDetail) -> RecipeOut:
    """Convert a repository detail into the API shape."""
    base = RecipeListOut.model_validate(detail.recipe)
    return RecipeOut(
        **base.model_dump(),
        ingredients=detail.ingredients,
        instructions=detail.instructions,
    )


def _store_upload(image: Optional[UploadFile], storage: LocalImageStorage) -> Optional[str]:
    """Validate and persist the optional image part; returns its public URL."""
    # Browsers send an empty file part when nothing was picked
    if image is None or not image.filename:
        return None
    storage.validate(image.filename, image.content_type)
    data = image.file.read(storage.max_bytes + 1)
    return storage.put_bytes(image.filename, image.content_type, data)


def recipe_form(
    title: str = Form(...),
    description: str = Form(...),
    category: str = Form(...),
    difficulty: str = Form(...),
    prep_time: str = Form(...),
    cook_time: str = Form(...),
    servings: str = Form(...),
    total_time: Optional[str] = Form(None),
    notes: Optional[str] = Form(None),
) -> RecipeFields:
    return RecipeFields(
        title=title,
        description=description,
        category=category,
        difficulty=difficulty,
        prep_time=prep_time,
        cook_time=cook_time,
        servings=servings,
        total_time=total_time or None,
        notes=notes or None,
    )


@router.get("/recipes", response_model=list[RecipeListOut])
def list_recipes(
    category: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    repo: RecipeRepository = Depends(get_repository),
):
    """List recipes, newest first. category=favorites selects favorites."""
    recipes = repo.list_recipes(RecipeFilter(category=category, search=search))
    return [RecipeListOut.model_validate(r) for r in recipes]


@router.get("/recipes/{recipe_id}", response_model=RecipeOut)
def get_recipe(
    recipe_id: int,
    repo: RecipeRepository = Depends(get_repository),
):
    return _recipe_to_out(repo.get_by_id(recipe_id))


@router.post(
    "/recipes",
    response_model=RecipeWriteResult,
    status_code=201,
    dependencies=[Depends(require_admin)],
)
def create_recipe(
    fields: RecipeFields = Depends(recipe_form),
    ingredients: Optional[str] = Form(None),
    instructions: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    repo: RecipeRepository = Depends(get_repository),
    context: AppContext = Depends(get_context),
):
    """Create a recipe. ingredients/instructions are JSON arrays encoded as text."""
    strict = context.settings.strict_child_payloads
    groups = parse_ingredient_groups(ingredients, strict=strict)
    steps = parse_instructions(instructions, strict=strict)

    image_url = _store_upload(image, context.storage)
    recipe_id = repo.create(fields, groups, steps, image_url=image_url)

    return RecipeWriteResult(
        message="Recipe created successfully",
        recipeId=recipe_id,
        image_url=image_url,
    )


@router.put(
    "/recipes/{recipe_id}",
    response_model=RecipeWriteResult,
    dependencies=[Depends(require_admin)],
)
def replace_recipe(
    recipe_id: int,
    fields: RecipeFields = Depends(recipe_form),
    ingredients: Optional[str] = Form(None),
    instructions: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    repo: RecipeRepository = Depends(get_repository),
    context: AppContext = Depends(get_context),
):
    """Replace scalar fields and all children. The image is kept unless a new one is sent."""
    strict = context.settings.strict_child_payloads
    groups = parse_ingredient_groups(ingredients, strict=strict)
    steps = parse_instructions(instructions, strict=strict)

    # 404 before anything is written to disk
    repo.get(recipe_id)

    image_url = _store_upload(image, context.storage)
    repo.replace(recipe_id, fields, groups, steps, image_url=image_url)

    return RecipeWriteResult(
        message="Recipe updated successfully",
        recipeId=recipe_id,
        image_url=image_url,
    )


@router.delete(
    "/recipes/{recipe_id}",
    response_model=RecipeDeleteResult,
    dependencies=[Depends(require_admin)],
)
def delete_recipe(
    recipe_id: int,
    repo: RecipeRepository = Depends(get_repository),
):
    """Delete a recipe, its ingredients, instructions and stored image."""
    repo.delete(recipe_id)
    return RecipeDeleteResult(message="Recipe deleted successfully", deletedId=recipe_id)


@router.patch(
    "/recipes/{recipe_id}/favorite",
    response_model=FavoriteToggleResult,
    dependencies=[Depends(require_admin_for_favorites)],
)
def toggle_favorite(
    recipe_id: int,
    repo: RecipeRepository = Depends(get_repository),
):
    is_favorite = repo.toggle_favorite(recipe_id)
    return FavoriteToggleResult(
        message="Favorite status toggled successfully",
        is_favorite=is_favorite,
    )
