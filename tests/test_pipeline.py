"""End-to-end tests for a conversion run."""

import json
from unittest.mock import patch

import pytest
from factories import FakeImageFetcher, cookbook_record, ingredient, recipe_record

from cookbookconverter.ingest.exceptions import DecodeError, MissingRequiredFieldError
from cookbookconverter.main import main
from cookbookconverter.pipeline import ConversionResult, run_conversion


def write_exports(settings, recipes, cookbooks=()):
    settings.recipes_path.write_text(json.dumps(list(recipes)), encoding="utf-8")
    settings.cookbooks_path.write_text(json.dumps(list(cookbooks)), encoding="utf-8")


@pytest.fixture
def collection():
    """Two recipes, one shared image, one placeholder, one unknown unit."""
    return [
        recipe_record(
            recipe_id="r1",
            title="Kartoffelsuppe",
            ingredient_lists=[
                {
                    "title": None,
                    "ingredients": [
                        ingredient("Kartoffeln", 1, "kg"),
                        ingredient("Knoblauch", 2, "Zehe(n)"),
                    ],
                }
            ],
            instructions=[{"id": "1", "title": "Zubereitung", "text": "Kochen."}],
            images=[
                {"author": "Anna", "url": "https://img.example.com/suppe.jpg"},
                {"author": None, "url": "https://img.example.com/shared.jpg"},
            ],
            source="https://www.chefkoch.de/rezepte/1",
            nutrition={"calories": 250},
        ),
        recipe_record(
            recipe_id="r2",
            title="Grüner Salat",
            ingredient_lists=[{"title": None, "ingredients": [ingredient("Salat", 1, "Zehe(n)")]}],
            images=[
                {"author": None, "url": "https://img.example.com/shared.jpg"},
                {"author": None, "url": "https://img.example.com/placeholder_recipe.jpg"},
            ],
        ),
    ]


class TestRunConversion:
    """Tests for the whole pipeline."""

    @pytest.mark.asyncio
    async def test_writes_aggregate_bundles_and_images(self, settings, collection, sequential_ids):
        """Test the full set of output files."""
        write_exports(settings, collection, [cookbook_record("c1", "Alltag", ["r2", "deleted"])])
        fetcher = FakeImageFetcher()

        result = await run_conversion(settings, fetcher=fetcher, id_factory=sequential_ids)

        assert isinstance(result, ConversionResult)
        assert result.recipes_total == 2
        assert [p.name for p in result.bundles_written] == [
            "1-kartoffelsuppe.crumb",
            "2-gruner-salat.crumb",
        ]
        assert sorted(fetcher.requested) == [
            "https://img.example.com/shared.jpg",
            "https://img.example.com/suppe.jpg",
        ]
        assert result.images_downloaded == 2
        assert result.images_failed == 0
        assert result.unmapped_units == ["Zehe(n)"]

        listing = json.loads((settings.output_dir / "recipes.json").read_text(encoding="utf-8"))
        assert list(listing) == ["r1", "r2"]
        assert listing["r2"]["title"] == "Grüner Salat"
        assert listing["r2"]["cookbookNames"] == ["Alltag"]
        assert listing["r1"]["cookbookNames"] == []
        assert listing["r1"]["ingredientGroups"][0]["ingredients"][1]["unit"] == "Zehe(n)"

        first = json.loads((settings.output_dir / "1-kartoffelsuppe.crumb").read_text())
        assert first["name"] == "Kartoffelsuppe"
        assert first["sourceName"] == "Chefkoch.de"
        assert len(first["images"]) == 2
        assert [e["ingredient"]["name"] for e in first["ingredients"]] == [
            "Kartoffeln",
            "Zehe(n) Knoblauch",
        ]
        assert [s["step"] for s in first["steps"]] == ["Kochen."]

        second = json.loads((settings.output_dir / "2-gruner-salat.crumb").read_text())
        assert len(second["images"]) == 1
        assert second["images"] == [first["images"][1]]
        assert second["neutritionalInfo"] is None

    @pytest.mark.asyncio
    async def test_aggregate_is_pretty_and_unicode(self, settings, collection, fake_fetcher):
        """Test the listing keeps umlauts and is indented."""
        write_exports(settings, collection)

        await run_conversion(settings, fetcher=fake_fetcher)

        text = (settings.output_dir / "recipes.json").read_text(encoding="utf-8")
        assert "Grüner Salat" in text
        assert '\n    "r1": {' in text

    @pytest.mark.asyncio
    async def test_failed_image_is_omitted(self, settings, collection):
        """Test a 404 image is left out of bundles without aborting."""
        write_exports(settings, collection)
        fetcher = FakeImageFetcher({"https://img.example.com/shared.jpg": (404, b"")})

        result = await run_conversion(settings, fetcher=fetcher)

        assert result.images_failed == 1
        second = json.loads(result.bundles_written[1].read_text())
        assert second["images"] == []

    @pytest.mark.asyncio
    async def test_cached_images_not_refetched(self, settings, collection, fake_fetcher):
        """Test a second run reuses the image cache."""
        write_exports(settings, collection)
        await run_conversion(settings, fetcher=fake_fetcher)

        again = FakeImageFetcher()
        result = await run_conversion(settings, fetcher=again)

        assert again.requested == []
        assert result.images_downloaded == 0

    @pytest.mark.asyncio
    async def test_missing_title_writes_nothing(self, settings, collection, fake_fetcher):
        """Test a corrupt recipe aborts before any output exists."""
        collection.append(recipe_record(recipe_id="r3", title=None))
        write_exports(settings, collection)

        with pytest.raises(MissingRequiredFieldError):
            await run_conversion(settings, fetcher=fake_fetcher)

        assert not settings.output_dir.exists()
        assert not settings.images_dir.exists()
        assert fake_fetcher.requested == []

    @pytest.mark.asyncio
    async def test_decode_error_writes_nothing(self, settings, collection, fake_fetcher):
        """Test a malformed envelope aborts before any output exists."""
        collection[0]["document"]["fields"]["rating"] = {"integerValue": "five"}
        write_exports(settings, collection)

        with pytest.raises(DecodeError):
            await run_conversion(settings, fetcher=fake_fetcher)

        assert not settings.output_dir.exists()

    def test_result_to_dict(self):
        """Test the summary dictionary."""
        result = ConversionResult()
        result.recipes_total = 3
        result.unmapped_units = ["Blatt"]

        assert result.to_dict() == {
            "recipes_total": 3,
            "bundles_written": 0,
            "images_downloaded": 0,
            "images_failed": 0,
            "unmapped_units": ["Blatt"],
        }


class TestMain:
    """Tests for the command line entry point."""

    def test_success(self, settings, collection):
        """Test a run driven by CLI flags."""
        write_exports(settings, collection)

        with (
            patch("cookbookconverter.main.configure_logging"),
            patch("cookbookconverter.pipeline.HttpImageConnector") as connector_cls,
        ):
            connector_cls.return_value.__aenter__.return_value = FakeImageFetcher()
            exit_code = main(
                [
                    "--input-dir",
                    str(settings.input_dir),
                    "--output-dir",
                    str(settings.output_dir),
                    "--images-dir",
                    str(settings.images_dir),
                    "--concurrency",
                    "1",
                ]
            )

        assert exit_code == 0
        assert (settings.output_dir / "1-kartoffelsuppe.crumb").exists()

    def test_fatal_error_exit_code(self, settings):
        """Test that conversion errors exit with status 1."""
        write_exports(settings, [recipe_record(title=None)])

        with patch("cookbookconverter.main.configure_logging"):
            exit_code = main(
                [
                    "--input-dir",
                    str(settings.input_dir),
                    "--output-dir",
                    str(settings.output_dir),
                    "--images-dir",
                    str(settings.images_dir),
                ]
            )

        assert exit_code == 1
        assert not settings.output_dir.exists()
