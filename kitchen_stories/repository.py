"""Query and mutation operations over the recipe store.

``RecipeRepository`` owns one SQLAlchemy session for the duration of a
request. Parent rows and their children are written in a single
transaction: a failure anywhere rolls the whole write back.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import delete, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .errors import RecipeNotFound
from .models import Recipe, RecipeIngredient, RecipeInstruction, utcnow
from .schemas import IngredientGroupIn, IngredientGroupOut, RecipeFields
from .services.storage import LocalImageStorage

logger = logging.getLogger("kitchen_stories.repository")

DEFAULT_GROUP = "Main"
ALL_CATEGORIES = "all"
FAVORITES = "favorites"


@dataclass
class RecipeFilter:
    category: Optional[str] = None
    search: Optional[str] = None


@dataclass
class RecipeDetail:
    recipe: Recipe
    ingredients: list[IngredientGroupOut]
    instructions: list[str]


def group_ingredients(lines: list[RecipeIngredient]) -> list[IngredientGroupOut]:
    """Group ingredient lines by label, in first-seen order.

    Lines must already be sorted by (sort_order, id). Empty labels are
    shown under the default group name.
    """
    groups: dict[str, list[str]] = {}
    for line in lines:
        name = line.ingredient_group or DEFAULT_GROUP
        groups.setdefault(name, []).append(line.ingredient_text)
    return [IngredientGroupOut(group=name, items=items) for name, items in groups.items()]


class RecipeRepository:
    def __init__(self, session: Session, storage: LocalImageStorage):
        self.session = session
        self.storage = storage

    # --- Reads ---

    def list_recipes(self, filters: Optional[RecipeFilter] = None) -> list[Recipe]:
        filters = filters or RecipeFilter()
        stmt = select(Recipe)

        if filters.category and filters.category != ALL_CATEGORIES:
            if filters.category == FAVORITES:
                stmt = stmt.where(Recipe.is_favorite.is_(True))
            else:
                stmt = stmt.where(Recipe.category == filters.category)

        if filters.search:
            pattern = f"%{filters.search}%"
            stmt = stmt.where(or_(Recipe.title.like(pattern), Recipe.description.like(pattern)))

        stmt = stmt.order_by(Recipe.created_at.desc(), Recipe.id.desc())
        return list(self.session.scalars(stmt).all())

    def get(self, recipe_id: int) -> Recipe:
        recipe = self.session.get(Recipe, recipe_id)
        if recipe is None:
            raise RecipeNotFound(recipe_id)
        return recipe

    def get_by_id(self, recipe_id: int) -> RecipeDetail:
        recipe = self.get(recipe_id)

        lines = self.session.scalars(
            select(RecipeIngredient)
            .where(RecipeIngredient.recipe_id == recipe_id)
            .order_by(RecipeIngredient.sort_order, RecipeIngredient.id)
        ).all()
        steps = self.session.scalars(
            select(RecipeInstruction)
            .where(RecipeInstruction.recipe_id == recipe_id)
            .order_by(RecipeInstruction.step_number)
        ).all()

        return RecipeDetail(
            recipe=recipe,
            ingredients=group_ingredients(list(lines)),
            instructions=[s.instruction_text for s in steps],
        )

    # --- Writes ---

    def _add_children(
        self,
        recipe_id: int,
        ingredients: list[IngredientGroupIn],
        instructions: list[str],
    ) -> None:
        for group in ingredients:
            for index, item in enumerate(group.items):
                self.session.add(
                    RecipeIngredient(
                        recipe_id=recipe_id,
                        ingredient_group=group.group or "",
                        ingredient_text=item,
                        sort_order=index,
                    )
                )
        for index, text in enumerate(instructions, start=1):
            self.session.add(
                RecipeInstruction(
                    recipe_id=recipe_id,
                    step_number=index,
                    instruction_text=text,
                )
            )

    def create(
        self,
        fields: RecipeFields,
        ingredients: list[IngredientGroupIn],
        instructions: list[str],
        image_url: Optional[str] = None,
        is_favorite: bool = False,
    ) -> int:
        """Insert a recipe and its children; returns the new id."""
        now = utcnow()
        recipe = Recipe(
            **fields.model_dump(),
            image_url=image_url,
            is_favorite=is_favorite,
            created_at=now,
            updated_at=now,
        )
        try:
            self.session.add(recipe)
            self.session.flush()
            self._add_children(recipe.id, ingredients, instructions)
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            # The image was stored before the insert; do not leave it orphaned
            if image_url:
                self.storage.delete(image_url)
            raise

        logger.info(
            f"Created recipe {recipe.id} ({fields.title!r}) with "
            f"{sum(len(g.items) for g in ingredients)} ingredient(s), {len(instructions)} step(s)"
        )
        return recipe.id

    def replace(
        self,
        recipe_id: int,
        fields: RecipeFields,
        ingredients: list[IngredientGroupIn],
        instructions: list[str],
        image_url: Optional[str] = None,
    ) -> Recipe:
        """Overwrite scalar fields and swap all children.

        The image reference only changes when a new image is supplied.
        """
        recipe = self.get(recipe_id)
        previous_image = recipe.image_url

        try:
            for name, value in fields.model_dump().items():
                setattr(recipe, name, value)
            if image_url:
                recipe.image_url = image_url
            recipe.updated_at = utcnow()

            self.session.execute(delete(RecipeIngredient).where(RecipeIngredient.recipe_id == recipe_id))
            self.session.execute(delete(RecipeInstruction).where(RecipeInstruction.recipe_id == recipe_id))
            self._add_children(recipe_id, ingredients, instructions)
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            if image_url:
                self.storage.delete(image_url)
            raise

        # Best effort: the old file is orphaned once the new reference is committed
        if image_url and previous_image and previous_image != image_url:
            self.storage.delete(previous_image)

        logger.info(f"Replaced recipe {recipe_id}")
        return recipe

    def delete(self, recipe_id: int) -> None:
        """Delete a recipe (children cascade) and its stored image."""
        recipe = self.get(recipe_id)
        image_url = recipe.image_url

        try:
            self.session.delete(recipe)
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            raise

        # After commit, so a failed file removal never leaves a broken row
        if image_url and not self.storage.delete(image_url):
            logger.warning(f"Failed to delete image {image_url} for recipe {recipe_id}")

        logger.info(f"Deleted recipe {recipe_id}")

    def toggle_favorite(self, recipe_id: int) -> bool:
        """Flip the favorite flag; returns the new value."""
        recipe = self.get(recipe_id)
        try:
            recipe.is_favorite = not recipe.is_favorite
            recipe.updated_at = utcnow()
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            raise
        return recipe.is_favorite

    def count(self) -> int:
        return self.session.scalar(select(func.count()).select_from(Recipe)) or 0
