import unittest
from datetime import datetime

import discord
from discord import app_commands

from norskbot.discord import messages
from norskbot.discord.commands import (
    CONTEXT_MENU_COMMANDS,
    TRANSLATE_COMMANDS,
    describe_detection,
    make_context_menu,
    make_translate_command,
)
from norskbot.discord.errors import admin_report, handle_app_command_error, notify_admin_error
from norskbot.discord.responders import is_moderator
from norskbot.discord.translate import translate_and_reply
from norskbot.ratelimit import InMemoryRateLimitStore, RateLimitResult, RateLimiter, RateLimitScope
from norskbot.translation.graph import TranslationOutput, Translator
from norskbot.translation.languages import DisplayLanguage, Language, get_emoji_data
from norskbot.translation.errors import UpstreamTranslationError
from norskbot.translation.router import TranslationRequest, TranslationResult, TranslationRouter

NO, EN_DISPLAY = DisplayLanguage.NORWEGIAN, DisplayLanguage.ENGLISH
NB, NN, EN = Language.BOKMAL, Language.NYNORSK, Language.ENGLISH


class FakeResponder:
    def __init__(self, is_pseudo=False, privileged=False):
        self.is_pseudo = is_pseudo
        self.user = "ola#0001"
        self.privileged = privileged
        self.deferred = []
        self.sent = []

    def scope(self):
        return RateLimitScope(user_id=1, channel_id=2, guild_id=3, privileged=self.privileged)

    async def defer(self, ephemeral):
        self.deferred.append(ephemeral)

    async def send(self, content=None, embed=None, ephemeral=False):
        self.sent.append({"content": content, "embed": embed, "ephemeral": ephemeral})


def make_router(fail=False):
    async def translate(source, target, text):
        if fail:
            raise UpstreamTranslationError("fake", "down", 503)
        return TranslationOutput(f"*{text}*", None)

    translators = [
        Translator("pivot", (NB, NN), (NB, NN), translate, expensive=False),
        Translator("universal", (NB, EN), (NB, EN), translate, expensive=True),
    ]
    return TranslationRouter(translators, RateLimiter(InMemoryRateLimitStore()))


def result(text="Hei", expensive=False, rate_limit=None):
    return TranslationResult(text, NB, NN, expensive, rate_limit)


class TestMessages(unittest.TestCase):
    def test_format_wait_time(self):
        self.assertEqual(messages.format_wait_time(5, EN_DISPLAY), "in 5 seconds")
        self.assertEqual(messages.format_wait_time(1, EN_DISPLAY), "in 1 second")
        self.assertEqual(messages.format_wait_time(61, EN_DISPLAY), "in 1 minute")
        self.assertEqual(messages.format_wait_time(25 * 60, NO), "om 25 minutt")
        self.assertEqual(messages.format_wait_time(2 * 3600 + 5, NO), "om 2 timar")
        self.assertEqual(messages.format_wait_time(60, NO), "om 60 sekund")

    def test_wait_time_never_shows_zero(self):
        self.assertEqual(messages.format_wait_time(0, NO), "om 1 sekund")
        self.assertEqual(messages.format_wait_time(0.2, EN_DISPLAY), "in 1 second")
        self.assertIn("in 1 second.", messages.rate_limited(0, EN_DISPLAY))

    def test_rate_limited_text(self):
        self.assertIn("Prøv igjen om 3 minutt", messages.rate_limited(180.4, NO))

    def test_sanitize_and_truncate(self):
        self.assertEqual(messages.sanitize(r"*a* _b_ `c` ~d~ \e"), r"\*a\* \_b\_ \`c\` \~d\~ \\e")
        self.assertEqual(messages.truncate("abcdef", 3), "abc…")
        self.assertEqual(messages.truncate("abc", 3), "abc")

    def test_embed_title_and_plain_footer(self):
        embed = messages.build_translation_embed(result("*x*"), NO, rng=lambda: 0.0)
        self.assertEqual(embed.title, "Omset frå bokmål til nynorsk")
        self.assertEqual(embed.description, r"\*x\*")
        self.assertEqual(embed.footer.text, messages.inaccuracy_warning(NO))

    def test_embed_footer_with_uses_left(self):
        limited = RateLimitResult(is_rate_limited=False, uses_left=1)
        embed = messages.build_translation_embed(
            result(expensive=True, rate_limit=limited), EN_DISPLAY, "ola#0001", rng=lambda: 0.9
        )
        self.assertTrue(embed.footer.text.startswith("@ola#0001 You have 1 translation left"))
        self.assertNotIn("donating", embed.description)

    def test_embed_footer_requested_by(self):
        embed = messages.build_translation_embed(result(), EN_DISPLAY, "ola#0001")
        self.assertTrue(embed.footer.text.startswith("Requested by ola#0001"))

    def test_donation_prompt_only_for_expensive(self):
        cheap = messages.build_translation_embed(result(), EN_DISPLAY, rng=lambda: 0.0)
        pricey = messages.build_translation_embed(result(expensive=True), EN_DISPLAY, rng=lambda: 0.0)
        self.assertNotIn("donating", cheap.description)
        self.assertIn("donating", pricey.description)


class TestTranslateAndReply(unittest.IsolatedAsyncioTestCase):
    async def test_success_defers_then_sends_embed(self):
        responder = FakeResponder()
        request = TranslationRequest(target=NN, text="Hei", source=NB, public=True)

        res = await translate_and_reply(make_router(), responder, request, NO)

        self.assertEqual(res.text, "*Hei*")
        self.assertEqual(responder.deferred, [False])
        self.assertEqual(len(responder.sent), 1)
        self.assertFalse(responder.sent[0]["ephemeral"])
        self.assertEqual(responder.sent[0]["embed"].description, r"\*Hei\*")

    async def test_same_language_is_answered_ephemerally(self):
        responder = FakeResponder()
        request = TranslationRequest(target=NB, text="Hei", source=NB)
        self.assertIsNone(await translate_and_reply(make_router(), responder, request, EN_DISPLAY))
        self.assertEqual(responder.deferred, [])
        self.assertEqual(responder.sent[0]["content"], "Cannot translate to the same language as the original text.")
        self.assertTrue(responder.sent[0]["ephemeral"])

    async def test_rate_limited_reply(self):
        router = make_router()
        responder = FakeResponder()
        request = TranslationRequest(target=EN, text="Hei", source=NB)
        for _ in range(3):
            await translate_and_reply(router, responder, request, NO)
        responder.sent.clear()

        self.assertIsNone(await translate_and_reply(router, responder, request, NO))
        self.assertIn("Du har brukt denne kommandoen for mykje", responder.sent[0]["content"])
        self.assertTrue(responder.sent[0]["ephemeral"])

    async def test_upstream_failure_is_reported(self):
        responder = FakeResponder()
        request = TranslationRequest(target=NN, text="Hei", source=NB)
        with self.assertLogs(level="ERROR"):
            res = await translate_and_reply(make_router(fail=True), responder, request, EN_DISPLAY)
        self.assertIsNone(res)
        self.assertEqual(responder.sent[-1]["content"], "An error occurred during translation. Try again later.")

    async def test_pseudo_responder_gets_requested_by_footer(self):
        responder = FakeResponder(is_pseudo=True)
        request = TranslationRequest(target=NN, text="Hei", source=NB, public=True)
        await translate_and_reply(make_router(), responder, request, EN_DISPLAY)
        self.assertIn("@ola#0001", responder.sent[0]["embed"].footer.text)

    async def test_provider_failure_alerts_admins(self):
        alerts = []

        async def notify(error, context):
            alerts.append((error, context))
            return 1

        request = TranslationRequest(target=NN, text="Hei", source=NB)
        with self.assertLogs(level="ERROR"):
            await translate_and_reply(make_router(fail=True), FakeResponder(), request, NO, notify=notify)
        self.assertEqual(len(alerts), 1)
        self.assertIsInstance(alerts[0][0], UpstreamTranslationError)
        self.assertEqual(alerts[0][1], "Translation nb->nn")

    async def test_rejections_do_not_alert_admins(self):
        alerts = []

        async def notify(error, context):
            alerts.append(context)
            return 1

        request = TranslationRequest(target=NB, text="Hei", source=NB)
        await translate_and_reply(make_router(), FakeResponder(), request, NO, notify=notify)
        self.assertEqual(alerts, [])


class FakeHTTPResponse:
    status = 404
    reason = "Not Found"


class FakeAdmin:
    def __init__(self):
        self.dms = []

    async def send(self, content):
        self.dms.append(content)


class FakeClient:
    def __init__(self, cached, fetchable):
        self.cached = cached
        self.fetchable = fetchable

    def get_user(self, user_id):
        return self.cached.get(user_id)

    async def fetch_user(self, user_id):
        if user_id not in self.fetchable:
            raise discord.NotFound(FakeHTTPResponse(), "Unknown User")
        return self.fetchable[user_id]


class FakeInteractionResponse:
    def __init__(self, done):
        self.done = done
        self.sent = []

    def is_done(self):
        return self.done

    async def send_message(self, content, ephemeral=False):
        self.sent.append((content, ephemeral))


class FakeFollowup:
    def __init__(self):
        self.sent = []

    async def send(self, content, ephemeral=False):
        self.sent.append((content, ephemeral))


class FakeCommand:
    name = "nben"


class FakeInteraction:
    def __init__(self, done=False):
        self.command = FakeCommand()
        self.user = "ola#0001"
        self.response = FakeInteractionResponse(done)
        self.followup = FakeFollowup()


class TestAdminNotifications(unittest.IsolatedAsyncioTestCase):
    def config(self, ids):
        return {"permissions": {"users": {"admin_ids": ids}}}

    async def test_every_admin_gets_a_dm(self):
        cached, fetched = FakeAdmin(), FakeAdmin()
        client = FakeClient({1: cached}, {2: fetched})
        error = UpstreamTranslationError("deepl", "quota", 456)

        reached = await notify_admin_error(client, self.config([1, 2]), error, "Translation nb->en")

        self.assertEqual(reached, 2)
        for admin in (cached, fetched):
            self.assertEqual(len(admin.dms), 1)
            self.assertIn("Translation nb->en", admin.dms[0])
            self.assertIn("Provider: deepl (HTTP 456)", admin.dms[0])
            self.assertIn("Quota Exceeded", admin.dms[0])

    async def test_unreachable_admin_is_skipped(self):
        admin = FakeAdmin()
        client = FakeClient({}, {1: admin})
        with self.assertLogs(level="WARNING"):
            reached = await notify_admin_error(client, self.config([1, 99]), RuntimeError("x"))
        self.assertEqual(reached, 1)
        self.assertEqual(len(admin.dms), 1)

    async def test_no_admins_configured(self):
        client = FakeClient({}, {})
        self.assertEqual(await notify_admin_error(client, {}, RuntimeError("x")), 0)
        self.assertEqual(await notify_admin_error(client, self.config([]), RuntimeError("x")), 0)

    def test_admin_report(self):
        report = admin_report(RuntimeError("boom"), "App command error: nben", datetime(2024, 5, 17, 12, 0))
        self.assertIn("2024-05-17 12:00:00", report)
        self.assertIn("App command error: nben", report)
        self.assertIn("RuntimeError: boom", report)
        self.assertNotIn("Provider", report)

    async def test_app_command_error_alerts_and_apologises(self):
        alerts = []

        async def notify(error, context):
            alerts.append(context)
            return 1

        fresh, deferred = FakeInteraction(done=False), FakeInteraction(done=True)
        with self.assertLogs(level="ERROR"):
            await handle_app_command_error(fresh, RuntimeError("boom"), notify)
            await handle_app_command_error(deferred, RuntimeError("boom"), notify)

        self.assertEqual(alerts, ["App command error: nben"] * 2)
        self.assertTrue(fresh.response.sent[0][1])
        self.assertEqual(fresh.followup.sent, [])
        self.assertEqual(deferred.response.sent, [])
        self.assertIn("Something went wrong", deferred.followup.sent[0][0])


class TestCommands(unittest.TestCase):
    def test_translate_commands(self):
        router = make_router()
        names = set()
        for definition in TRANSLATE_COMMANDS:
            cmd = make_translate_command(definition, router)
            self.assertIsInstance(cmd, app_commands.Command)
            self.assertEqual([p.name for p in cmd.parameters], ["tekst", "vis_alle"])
            self.assertFalse(cmd.parameters[1].required)
            names.add(cmd.name)
        self.assertEqual(names, {"nbnn", "nnnb", "nben", "nnen", "ennb", "ennn"})

    def test_description_is_bilingual(self):
        self.assertEqual(
            TRANSLATE_COMMANDS[0].description,
            "Omset frå bokmål til nynorsk / Translate from Bokmål to Nynorsk",
        )

    def test_context_menus(self):
        router = make_router()
        menus = [make_context_menu(definition, router) for definition in CONTEXT_MENU_COMMANDS]
        self.assertEqual([m.name for m in menus], ["To English", "To Bokmål", "To Nynorsk"])

    def test_describe_detection(self):
        text = describe_detection("kari", "Eg er her", [(NN, 0.9), (NB, 0.6), (EN, 0.1)])
        self.assertIn("**90.00% confident**", text)
        self.assertIn("**Nynorsk**", text)
        self.assertIn("- Bokmål (60.00%)", text)
        self.assertNotIn("English", text)

    def test_describe_detection_nothing_confident(self):
        self.assertIn("couldn't detect", describe_detection("kari", "?", [(NN, 0.2)]))


class TestHelpers(unittest.TestCase):
    def test_emoji_lookup(self):
        self.assertEqual(get_emoji_data("translatenn", "translate").language, NN)
        self.assertIsNone(get_emoji_data("translatenndone", "translate"))
        self.assertEqual(get_emoji_data("translateendone").language, EN)
        self.assertIsNone(get_emoji_data("thumbsup"))

    def test_is_moderator(self):
        class Perms:
            def __init__(self, kick=False, ban=False):
                self.kick_members = kick
                self.ban_members = ban

        class Member:
            def __init__(self, perms):
                self.guild_permissions = perms

        self.assertTrue(is_moderator(Member(Perms(kick=True))))
        self.assertTrue(is_moderator(Member(Perms(ban=True))))
        self.assertFalse(is_moderator(Member(Perms())))
        self.assertFalse(is_moderator(object()))


if __name__ == "__main__":
    unittest.main()
