"""
StackIt Backend — Answer API Tests
====================================

What we test:
    ✅ Anonymous answers are rejected with "Login required" and nothing is stored
    ✅ Blank answers → 400 "Answer required"
    ✅ Answers list newest first
    ✅ Answer votes move by exactly one
    ✅ Accepting B after A leaves only B accepted and the question answered
    ✅ A failure partway through accepting keeps the previous acceptance
    ✅ Only the question owner can accept
    ✅ Only the author can edit an answer; blank edits → 400
    ✅ Deleting the accepted answer clears has_accepted_answer
"""

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from stackit.models import Answer


async def count_answers(session_factory) -> int:
    async with session_factory() as session:
        return (await session.execute(select(func.count(Answer.id)))).scalar()


class TestPostAnswer:

    @pytest.mark.asyncio
    async def test_anonymous_answer_rejected(self, test_client, session_factory, seed_question):
        question_id = await seed_question()

        response = await test_client.post(
            f"/api/questions/{question_id}/answers",
            json={"content": "Try flexbox"},
        )

        assert response.status_code == 401
        assert response.json()["message"] == "Login required"
        assert await count_answers(session_factory) == 0

    @pytest.mark.asyncio
    async def test_blank_answer_rejected(
        self, test_client, session_factory, seed_question, make_user, auth_headers
    ):
        question_id = await seed_question()

        response = await test_client.post(
            f"/api/questions/{question_id}/answers",
            json={"content": "  \n "},
            headers=auth_headers(make_user()),
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Answer required"
        assert await count_answers(session_factory) == 0

    @pytest.mark.asyncio
    async def test_answer_to_missing_question_404(self, test_client, make_user, auth_headers):
        response = await test_client.post(
            "/api/questions/00000000-0000-0000-0000-000000000000/answers",
            json={"content": "Hello"},
            headers=auth_headers(make_user()),
        )
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_answer_posted_and_listed(self, test_client, seed_question, make_user, auth_headers):
        question_id = await seed_question()
        user = make_user(username="grace")

        response = await test_client.post(
            f"/api/questions/{question_id}/answers",
            json={"content": "Use `reversed()`."},
            headers=auth_headers(user),
        )

        assert response.status_code == 201
        body = response.json()
        assert body["question_id"] == str(question_id)
        assert body["author_name"] == "grace"
        assert body["votes"] == 0
        assert body["is_accepted"] is False

        detail = (await test_client.get(f"/api/questions/{question_id}")).json()
        assert detail["answer_count"] == 1

    @pytest.mark.asyncio
    async def test_answers_listed_newest_first(self, test_client, seed_question, seed_answer):
        question_id = await seed_question()
        older = await seed_answer(question_id, content="first", minutes_ago=5)
        newer = await seed_answer(question_id, content="second", minutes_ago=1)

        answers = (await test_client.get(f"/api/questions/{question_id}/answers")).json()

        assert [a["id"] for a in answers] == [str(newer), str(older)]


class TestAnswerVotes:

    @pytest.mark.asyncio
    async def test_up_then_down_restores_votes(
        self, test_client, seed_question, seed_answer, make_user, auth_headers
    ):
        answer_id = await seed_answer(await seed_question())
        headers = auth_headers(make_user())

        up = await test_client.post(f"/api/answers/{answer_id}/vote", json={"direction": "up"}, headers=headers)
        down = await test_client.post(f"/api/answers/{answer_id}/vote", json={"direction": "down"}, headers=headers)

        assert up.json()["votes"] == 1
        assert down.json()["votes"] == 0

    @pytest.mark.asyncio
    async def test_invalid_direction_rejected(
        self, test_client, seed_question, seed_answer, make_user, auth_headers
    ):
        answer_id = await seed_answer(await seed_question())

        response = await test_client.post(
            f"/api/answers/{answer_id}/vote",
            json={"direction": "sideways"},
            headers=auth_headers(make_user()),
        )

        assert response.status_code == 422


class TestAcceptAnswer:

    @pytest.mark.asyncio
    async def test_accepting_second_answer_moves_acceptance(
        self, test_client, seed_question, seed_answer, make_user, auth_headers
    ):
        owner = make_user()
        question_id = await seed_question(owner=owner)
        answer_a = await seed_answer(question_id, content="A")
        answer_b = await seed_answer(question_id, content="B")
        headers = auth_headers(owner)

        first = await test_client.post(f"/api/answers/{answer_a}/accept", headers=headers)
        second = await test_client.post(f"/api/answers/{answer_b}/accept", headers=headers)

        assert first.status_code == 200
        assert second.status_code == 200
        answers = (await test_client.get(f"/api/questions/{question_id}/answers")).json()
        accepted = {a["id"]: a["is_accepted"] for a in answers}
        assert accepted == {str(answer_a): False, str(answer_b): True}

        detail = (await test_client.get(f"/api/questions/{question_id}")).json()
        assert detail["has_accepted_answer"] is True

        accepted_only = (await test_client.get("/api/questions", params={"filter": "accepted"})).json()
        assert [q["id"] for q in accepted_only["questions"]] == [str(question_id)]

    @pytest.mark.asyncio
    async def test_accepting_same_answer_twice_is_harmless(
        self, test_client, seed_question, seed_answer, make_user, auth_headers
    ):
        owner = make_user()
        question_id = await seed_question(owner=owner)
        answer_id = await seed_answer(question_id)
        headers = auth_headers(owner)

        await test_client.post(f"/api/answers/{answer_id}/accept", headers=headers)
        again = await test_client.post(f"/api/answers/{answer_id}/accept", headers=headers)

        assert again.status_code == 200
        assert again.json()["is_accepted"] is True

    @pytest.mark.asyncio
    async def test_failure_after_clearing_keeps_previous_acceptance(
        self, test_client, seed_question, seed_answer, make_user, auth_headers, monkeypatch
    ):
        owner = make_user()
        question_id = await seed_question(owner=owner)
        answer_a = await seed_answer(question_id, content="A")
        answer_b = await seed_answer(question_id, content="B")
        headers = auth_headers(owner)
        assert (await test_client.post(f"/api/answers/{answer_a}/accept", headers=headers)).status_code == 200

        real_execute = AsyncSession.execute
        answer_updates = []

        async def execute_until_second_answer_update(self, statement, *args, **kwargs):
            # The first UPDATE on answers clears the old acceptance; break the next one
            if getattr(statement, "is_update", False) and statement.table.name == "answers":
                answer_updates.append(statement)
                if len(answer_updates) == 2:
                    raise RuntimeError("connection reset by peer")
            return await real_execute(self, statement, *args, **kwargs)

        with monkeypatch.context() as m:
            m.setattr(AsyncSession, "execute", execute_until_second_answer_update)
            response = await test_client.post(f"/api/answers/{answer_b}/accept", headers=headers)

        assert len(answer_updates) == 2
        assert response.status_code == 500
        assert response.json()["message"] == "Could not accept the answer. Please try again."

        answers = (await test_client.get(f"/api/questions/{question_id}/answers")).json()
        accepted = {a["id"]: a["is_accepted"] for a in answers}
        assert accepted == {str(answer_a): True, str(answer_b): False}
        detail = (await test_client.get(f"/api/questions/{question_id}")).json()
        assert detail["has_accepted_answer"] is True

    @pytest.mark.asyncio
    async def test_non_owner_cannot_accept(
        self, test_client, seed_question, seed_answer, make_user, auth_headers
    ):
        question_id = await seed_question(owner=make_user())
        answer_id = await seed_answer(question_id)

        response = await test_client.post(
            f"/api/answers/{answer_id}/accept",
            headers=auth_headers(make_user()),
        )

        assert response.status_code == 403
        assert response.json()["message"] == "Only question owner can accept answers"
        detail = (await test_client.get(f"/api/questions/{question_id}")).json()
        assert detail["has_accepted_answer"] is False


class TestDeleteAnswer:

    @pytest.mark.asyncio
    async def test_deleting_accepted_answer_clears_flag(
        self, test_client, seed_question, seed_answer, make_user, auth_headers
    ):
        owner = make_user()
        answerer = make_user()
        question_id = await seed_question(owner=owner)
        answer_id = await seed_answer(question_id, owner=answerer)
        await test_client.post(f"/api/answers/{answer_id}/accept", headers=auth_headers(owner))

        response = await test_client.delete(f"/api/answers/{answer_id}", headers=auth_headers(answerer))

        assert response.status_code == 204
        detail = (await test_client.get(f"/api/questions/{question_id}")).json()
        assert detail["has_accepted_answer"] is False
        assert detail["answer_count"] == 0

    @pytest.mark.asyncio
    async def test_non_author_cannot_delete(
        self, test_client, seed_question, seed_answer, make_user, auth_headers
    ):
        answer_id = await seed_answer(await seed_question(), owner=make_user())

        response = await test_client.delete(f"/api/answers/{answer_id}", headers=auth_headers(make_user()))

        assert response.status_code == 403


class TestEditAnswer:

    @pytest.mark.asyncio
    async def test_author_edits_content(
        self, test_client, seed_question, seed_answer, make_user, auth_headers
    ):
        owner = make_user()
        answerer = make_user()
        question_id = await seed_question(owner=owner)
        answer_id = await seed_answer(question_id, content="first draft", owner=answerer)
        await test_client.post(f"/api/answers/{answer_id}/accept", headers=auth_headers(owner))

        response = await test_client.patch(
            f"/api/answers/{answer_id}",
            json={"content": "Use `place-items: center` on the grid container."},
            headers=auth_headers(answerer),
        )

        assert response.status_code == 200
        body = response.json()
        assert body["content"] == "Use `place-items: center` on the grid container."
        assert body["is_accepted"] is True
        listed = (await test_client.get(f"/api/questions/{question_id}/answers")).json()
        assert listed[0]["content"] == "Use `place-items: center` on the grid container."

    @pytest.mark.asyncio
    async def test_non_author_cannot_edit(
        self, test_client, seed_question, seed_answer, make_user, auth_headers
    ):
        question_id = await seed_question()
        answer_id = await seed_answer(question_id, content="original", owner=make_user())

        response = await test_client.patch(
            f"/api/answers/{answer_id}",
            json={"content": "vandalized"},
            headers=auth_headers(make_user()),
        )

        assert response.status_code == 403
        assert response.json()["message"] == "Only the author can edit this answer"
        listed = (await test_client.get(f"/api/questions/{question_id}/answers")).json()
        assert listed[0]["content"] == "original"

    @pytest.mark.asyncio
    async def test_blank_edit_rejected(
        self, test_client, seed_question, seed_answer, make_user, auth_headers
    ):
        answerer = make_user()
        question_id = await seed_question()
        answer_id = await seed_answer(question_id, content="original", owner=answerer)

        response = await test_client.patch(
            f"/api/answers/{answer_id}",
            json={"content": "  \n "},
            headers=auth_headers(answerer),
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Answer required"
        listed = (await test_client.get(f"/api/questions/{question_id}/answers")).json()
        assert listed[0]["content"] == "original"

    @pytest.mark.asyncio
    async def test_anonymous_edit_rejected(self, test_client, seed_question, seed_answer, make_user):
        answer_id = await seed_answer(await seed_question(), owner=make_user())

        response = await test_client.patch(f"/api/answers/{answer_id}", json={"content": "x"})

        assert response.status_code == 401
