import asyncio
import base64

import pytest
from google.genai import types

from conftest import FakeGeminiClient, image_part, make_response, run, text_part
from character_generator.services.generation import (
    GENERIC_ERROR_MESSAGE,
    NO_IMAGE_MESSAGE,
    GenerationOrchestrator,
    ImageRequiredError,
    error_message,
    first_inline_image,
)
from character_generator.state import (
    Failed,
    Idle,
    InlineImage,
    InputStateHolder,
    Loading,
    Succeeded,
)


class ProviderError(Exception):
    def __init__(self, message):
        super().__init__(f"500 INTERNAL {message}")
        self.message = message


def make_orchestrator(client, image=None):
    holder = InputStateHolder()
    if image is not None:
        holder.set_image(image)
    seen = []
    orchestrator = GenerationOrchestrator(holder, client)
    orchestrator._on_change = lambda: seen.append(orchestrator.state)
    return orchestrator, seen


def test_trigger_without_image_stays_idle(fake_client):
    orchestrator, seen = make_orchestrator(fake_client)
    with pytest.raises(ImageRequiredError) as exc_info:
        run(orchestrator.generate())
    assert str(exc_info.value) == "Please upload a character image first."
    assert orchestrator.state == Idle()
    assert seen == []
    assert fake_client.calls == []


def test_successful_generation(fake_client, jpeg_image):
    orchestrator, seen = make_orchestrator(fake_client, jpeg_image)
    orchestrator.holder.set_style("anime")

    state = run(orchestrator.generate())

    assert state == Succeeded(
        InlineImage(data=base64.b64encode(b"generated").decode(), mime_type="image/png")
    )
    assert seen == [Loading(), state]
    image, prompt = fake_client.calls[0]
    assert image == jpeg_image
    assert prompt == (
        "An anime style image of the person from the provided photo, in the "
        "setting of a beach. The person is wearing casual wear and is sitting "
        "on a chair. Maintain the person's identity and features from the "
        "original photo."
    )


def test_first_image_part_wins(jpeg_image):
    client = FakeGeminiClient(
        response=make_response(
            text_part("Here you go"),
            image_part(b"first", "image/jpeg"),
            image_part(b"second", "image/png"),
        )
    )
    orchestrator, _ = make_orchestrator(client, jpeg_image)

    state = run(orchestrator.generate())

    assert isinstance(state, Succeeded)
    assert base64.b64decode(state.image.data) == b"first"
    assert state.image.to_data_url().startswith("data:image/jpeg;base64,")


def test_no_image_in_response(jpeg_image):
    client = FakeGeminiClient(response=make_response(text_part("I can't do that")))
    orchestrator, _ = make_orchestrator(client, jpeg_image)

    assert run(orchestrator.generate()) == Failed(NO_IMAGE_MESSAGE)
    assert NO_IMAGE_MESSAGE == (
        "The AI didn't return an image. Please try a different prompt or image."
    )


def test_response_without_candidates(jpeg_image):
    client = FakeGeminiClient(response=types.GenerateContentResponse())
    orchestrator, _ = make_orchestrator(client, jpeg_image)

    assert run(orchestrator.generate()) == Failed(NO_IMAGE_MESSAGE)


def test_service_error_uses_message_field(jpeg_image):
    client = FakeGeminiClient(error=ProviderError("Quota exceeded"))
    orchestrator, _ = make_orchestrator(client, jpeg_image)

    assert run(orchestrator.generate()) == Failed("Quota exceeded")


def test_service_error_without_text_uses_generic_message(jpeg_image):
    client = FakeGeminiClient(error=RuntimeError())
    orchestrator, _ = make_orchestrator(client, jpeg_image)

    assert run(orchestrator.generate()) == Failed(GENERIC_ERROR_MESSAGE)


def test_error_message_extraction():
    assert error_message(ProviderError("Bad request")) == "Bad request"
    assert error_message(ProviderError("   ")) == "500 INTERNAL    "
    assert error_message(ValueError("network down")) == "network down"
    assert error_message(ValueError()) == GENERIC_ERROR_MESSAGE


def test_new_trigger_clears_previous_result(fake_client, jpeg_image):
    orchestrator, seen = make_orchestrator(fake_client, jpeg_image)
    run(orchestrator.generate())
    fake_client.error = ProviderError("Overloaded")

    state = run(orchestrator.generate())

    assert state == Failed("Overloaded")
    # Succeeded -> Loading -> Failed; the old image is gone as soon as Loading starts.
    assert seen[2:] == [Loading(), Failed("Overloaded")]


def test_second_trigger_while_loading_is_ignored(fake_client, jpeg_image):
    orchestrator, seen = make_orchestrator(fake_client, jpeg_image)

    async def scenario():
        fake_client.gate = asyncio.Event()
        first = asyncio.create_task(orchestrator.generate())
        await asyncio.sleep(0)
        assert orchestrator.state == Loading()

        second = await orchestrator.generate()
        assert second == Loading()
        assert len(fake_client.calls) == 1

        fake_client.gate.set()
        return await first

    state = run(scenario())
    assert isinstance(state, Succeeded)
    assert seen == [Loading(), state]


def test_cancelled_request_returns_to_actionable_state(fake_client, jpeg_image):
    orchestrator, _ = make_orchestrator(fake_client, jpeg_image)

    async def scenario():
        fake_client.gate = asyncio.Event()
        task = asyncio.create_task(orchestrator.generate())
        await asyncio.sleep(0)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    run(scenario())
    assert orchestrator.state == Failed(GENERIC_ERROR_MESSAGE)


def test_read_failure_and_clear_error(fake_client):
    orchestrator, _ = make_orchestrator(fake_client)
    assert orchestrator.record_read_failure() is True
    assert orchestrator.state == Failed("Failed to read the file.")

    orchestrator.clear_error()
    assert orchestrator.state == Idle()


def test_read_failure_ignored_while_loading(fake_client):
    orchestrator, _ = make_orchestrator(fake_client)
    orchestrator.state = Loading()
    assert orchestrator.record_read_failure() is False
    assert orchestrator.state == Loading()


def test_first_inline_image_skips_empty_blobs():
    response = make_response(
        image_part(b"", "image/png"), image_part(b"real", "image/webp")
    )
    image = first_inline_image(response)
    assert image == InlineImage(
        data=base64.b64encode(b"real").decode(), mime_type="image/webp"
    )
