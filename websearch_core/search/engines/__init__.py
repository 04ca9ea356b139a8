# © Copyright IBM Corporation 2025
# SPDX-License-Identifier: Apache-2.0
